#!/usr/bin/env python3
"""Demonstration of CLI key rotation commands."""

import json
import subprocess
import sys
import tempfile
from pathlib import Path


def run_cli_command(cmd_args):
    """Run a CLI command and return the exit code and parsed JSON output."""
    result = subprocess.run(
        [sys.executable, "-m", "splurge_keymaster.cli"] + cmd_args,
        capture_output=True,
        text=True,
    )
    output = result.stdout if result.returncode == 0 else result.stderr
    return result.returncode, json.loads(output)


def main():
    """Demonstrate CLI key rotation functionality."""
    print("CLI Key Rotation Demonstration")
    print("=" * 50)

    with tempfile.TemporaryDirectory() as temp_dir:
        data_dir = str(Path(temp_dir) / "keymaster-data")
        print(f"Using data directory: {data_dir}")

        print("\n1. Adding keys...")
        for name in ("primary", "secondary"):
            returncode, response = run_cli_command(
                ["-d", data_dir, "add", "-n", name, "-v", f"sk-{name}-0123456789"]
            )
            if returncode != 0:
                print(f"  Failed to add {name}: {response['message']}")
                return
            print(f"  Added {response['name']} (current: {response['current']})")

        print("\n2. Current key...")
        _, response = run_cli_command(["-d", data_dir, "current"])
        print(f"  {response['key']['name']} ({response['active_count']}/{response['total_count']} active)")

        print("\n3. Exhausting the current key...")
        _, response = run_cli_command(["-d", data_dir, "exhaust", "-n", "primary"])
        print(f"  {response['message']}, next: {response['next']['name']}")

        print("\n4. Exhausting the last active key...")
        _, response = run_cli_command(["-d", data_dir, "exhaust", "-n", "secondary"])
        print(f"  {response['message']}")

        returncode, response = run_cli_command(["-d", data_dir, "current"])
        print(f"  current exits with {returncode}: {response['error_code']}")

        print("\n5. Resetting the pool...")
        _, response = run_cli_command(["-d", data_dir, "reset"])
        print(f"  current key is {response['current']} again")

        print("\nDemonstration complete")


if __name__ == "__main__":
    main()
