#!/usr/bin/env python3
"""Example usage of the key service with a temporary key store."""

import tempfile

from splurge_keymaster import FileManager, KeyService, StoreService
from splurge_keymaster.formatting import format_key_list, format_statistics


def main():
    """Demonstrate adding, rotating and exhausting keys."""

    with tempfile.TemporaryDirectory() as temp_dir:
        print(f"Using temporary directory: {temp_dir}")

        service = KeyService(StoreService(FileManager(temp_dir)))

        # The first key added becomes current
        print("Adding keys...")
        for name, value in [
            ("openai-main", "sk-main-0123456789"),
            ("openai-backup", "sk-backup-0123456789"),
            ("openai-spare", "sk-spare-0123456789"),
        ]:
            result = service.add_key(name, value)
            print(f"  {result.message} (current: {result.key.current})")
        print()

        current = service.current_key()
        print(f"Current key: {current.key.name}")

        rotated = service.next_key()
        print(f"{rotated.message}")

        # Exhausting the current key moves on to the next active key
        exhausted = service.exhaust_key(rotated.key.name)
        print(f"{exhausted.message}; now using {exhausted.key.name}")
        print()

        print(format_key_list(service.list_keys().store))
        print()

        duplicate = service.add_key("openai-main", "sk-other")
        print(f"Adding a duplicate name fails with: {duplicate.error_code}")

        missing = service.select_key("does-not-exist")
        print(f"Selecting an unknown key fails with: {missing.error_code}")
        print()

        service.reset_all()
        print(format_statistics(service.statistics().statistics))


if __name__ == "__main__":
    main()
