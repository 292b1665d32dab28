"""Allow ``python -m planilla_processor``."""

from planilla_processor.cli import app

if __name__ == "__main__":
    app()
