import json
import sys
from pathlib import Path

from visitor_location.main import app


def main(out_path: Path = Path("openapi") / "visitor-location.openapi.json") -> None:
    """Write the service's OpenAPI schema to `out_path`."""
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(app.openapi(), indent=2))
    print(f"Wrote {out_path}")  # noqa: T201


if __name__ == "__main__":
    main(*(Path(arg) for arg in sys.argv[1:2]))
