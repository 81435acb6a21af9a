#!/usr/bin/env python3
"""
Development startup script.
Creates a virtual environment, installs the backend and launches it with reload.

Usage: python dev.py [--test]
"""

import subprocess
import sys
import shutil
from pathlib import Path

ROOT = Path(__file__).parent
BACKEND = ROOT / "backend"
VENV = ROOT / "venv"


def run(cmd, cwd=None, check=True):
    """Run a command and return the result."""
    print(f"\n> {cmd}")
    return subprocess.run(cmd, shell=True, cwd=cwd, check=check)


def venv_tools():
    """Return (pip, python) inside the project virtual environment."""
    if sys.platform == "win32":
        return VENV / "Scripts" / "pip", VENV / "Scripts" / "python"
    return VENV / "bin" / "pip", VENV / "bin" / "python"


def setup_backend():
    """Install the package with test extras and make sure .env exists."""
    print("\n=== Setting up backend ===")

    if not VENV.exists():
        print("Creating virtual environment...")
        run(f'"{sys.executable}" -m venv venv', cwd=ROOT)

    pip, python = venv_tools()

    print("Installing dependencies...")
    run(f'"{pip}" install -e ".[test]"', cwd=ROOT)

    env_file = BACKEND / ".env"
    env_example = ROOT / ".env.example"
    if not env_file.exists() and env_example.exists():
        print("Creating .env from .env.example...")
        shutil.copy(env_example, env_file)

    return python


def main():
    print("=" * 50)
    print("Relativity Explorer - Development Server")
    print("=" * 50)

    python = setup_backend()

    if "--test" in sys.argv[1:]:
        result = run(f'"{python}" -m pytest', cwd=ROOT, check=False)
        sys.exit(result.returncode)

    print("\nBackend:  http://localhost:8000")
    print("API Docs: http://localhost:8000/docs")
    print("\nPress Ctrl+C to stop\n")

    try:
        run(f'"{python}" -m uvicorn relativity_explorer.main:app --reload', cwd=BACKEND)
    except KeyboardInterrupt:
        print("\n\nShutting down...")


if __name__ == "__main__":
    main()
