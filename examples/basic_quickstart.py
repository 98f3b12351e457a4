from tinyrbac import build_from_policy, decode_policy


def main() -> None:
    policy = decode_policy(
        {
            "description": "orders service",
            "resources": ["orders", "invoices"],
            "roles": [
                {"name": "admin", "resources": [{"name": "*", "actions": ["GET", "POST", "DELETE"]}]},
                {"name": "clerk", "resources": [{"name": "orders", "actions": ["GET", "POST"]}]},
            ],
        }
    )
    model = build_from_policy(policy)

    print(model.is_allowed("clerk", "orders", "POST"))  # True
    print(model.is_allowed("clerk", "invoices", "GET"))  # False

    d = model.check("guest", "orders", "GET")
    print(d.allowed, d.reason)  # False "unknown role: guest"


if __name__ == "__main__":
    main()
