"""cert-webhook from a source checkout, without `pip install`.

`python -m main serve` starts the webhook; `python -m main sync -n NS -s NAME`
pushes one secret to the NodeBalancer. `src/` is put on `sys.path` so the
`core`, `adapters`, `api` and `cli` packages resolve.
"""

from __future__ import annotations

import sys
from pathlib import Path


def main() -> None:
    src = Path(__file__).resolve().parent / "src"
    if str(src) not in sys.path:
        sys.path.insert(0, str(src))

    from cli.main import run  # noqa: PLC0415

    run()


if __name__ == "__main__":
    main()
