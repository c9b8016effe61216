"""`python -m main` from `src/`: runs the cert-webhook CLI.

Same commands as the `cert-webhook` console script (`serve`, `sync`,
`doctor run`); handy inside the container image or a source checkout.
"""

from __future__ import annotations

from cli.main import run


def main() -> None:
    run()


if __name__ == "__main__":
    main()
