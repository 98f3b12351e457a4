import json
import os
import tempfile

from tinyrbac import HotReloader, ModelHolder, load_model
from tinyrbac.store import FilePolicySource


def _policy(actions):
    return {
        "resources": ["docs"],
        "roles": [{"name": "editor", "resources": [{"name": "docs", "actions": actions}]}],
    }


def _write(path, doc):
    with open(path, "w", encoding="utf-8") as f:
        json.dump(doc, f)


def main() -> None:
    fd, path = tempfile.mkstemp(suffix=".json")
    os.close(fd)

    try:
        _write(path, _policy(["GET"]))
        holder = ModelHolder(load_model(path))
        mgr = HotReloader(holder, FilePolicySource(path))

        print("first:", holder.is_allowed("editor", "docs", "PUT"))  # False

        _write(path, _policy(["GET", "PUT"]))
        mgr.check_and_reload()

        print("after:", holder.is_allowed("editor", "docs", "PUT"))  # True
    finally:
        try:
            os.remove(path)
        except PermissionError:
            pass


if __name__ == "__main__":
    main()
