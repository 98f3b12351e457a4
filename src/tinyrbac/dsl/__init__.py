from .validate import POLICY_SCHEMA, schema_errors, validate_document

__all__ = ["POLICY_SCHEMA", "schema_errors", "validate_document"]
