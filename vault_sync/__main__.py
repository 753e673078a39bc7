"""Allow running as ``python -m vault_sync``."""

from vault_sync.cli import app

if __name__ == "__main__":
    app()
