import sys
from pathlib import Path

from piedpiper.config import parse_config_file, schema_errors
from piedpiper.errors import ConfigLoadError


def main(path) -> int:
    path = Path(path)
    try:
        data = parse_config_file(path)
    except ConfigLoadError as e:
        print(f"[ERROR] {e}")
        return 1

    errors = schema_errors(data)
    if errors:
        for err in errors:
            print(f"[SCHEMA ERROR] {err}")
        return 1

    print(f"[OK] Config '{path}' is valid.")
    return 0


def cli() -> int:
    if len(sys.argv) != 2:
        print("Usage: piedpiper-validate <config file>")
        return 1
    return main(sys.argv[1])


if __name__ == "__main__":
    sys.exit(cli())
