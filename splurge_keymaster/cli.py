#!/usr/bin/env python3
"""Command-line interface for the Splurge Keymaster system."""

import argparse
import json
import logging
import os
import sys
from typing import Any, Optional

from splurge_keymaster import formatting
from splurge_keymaster.authorization import AccessControl
from splurge_keymaster.config import KeymasterConfig
from splurge_keymaster.exceptions import AuthorizationError, FileOperationError, ValidationError
from splurge_keymaster.file_manager import FileManager
from splurge_keymaster.models import KeyRecord, KeyStore
from splurge_keymaster.services import KeyService, ServiceResult, StoreService
from splurge_keymaster.sessions import (
    STEP_EMAIL,
    STEP_NAME,
    STEP_PASSWORD,
    STEP_VALUE,
    KeyDraft,
    SessionRegistry,
)


class KeymasterCLI:
    """Command-line interface for the Keymaster system."""

    def __init__(self, config: KeymasterConfig | None = None) -> None:
        """Initialize the CLI.

        Args:
            config: Configuration to use (default: read from environment)
        """
        self._config = config or KeymasterConfig.from_environment()
        self._parser = self._create_parser()
        self._sessions = SessionRegistry()
        self._pretty = False
        self._text = False

    def _default_operator(self) -> str | None:
        """Operator id used when -o/--operator is not given."""
        return (
            os.getenv("KEYMASTER_OPERATOR")
            or os.getenv("USER")
            or os.getenv("USERNAME")
        )

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser.

        Returns:
            Configured argument parser
        """
        parser = argparse.ArgumentParser(
            description="Splurge Keymaster - Rotate a pool of API keys",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Add keys (the first key added becomes current)
  splurge-keymaster -d /path/to/data add -n primary -v "sk-..."
  splurge-keymaster -d /path/to/data add -n backup -v "sk-..." -e ops@example.com

  # Add a key interactively
  splurge-keymaster -d /path/to/data add

  # Show the current key
  splurge-keymaster -d /path/to/data --text current

  # Switch to the next active key
  splurge-keymaster -d /path/to/data next

  # Mark a key exhausted and move on to the next one
  splurge-keymaster -d /path/to/data exhaust -n primary

  # Reactivate a key or choose the current key explicitly
  splurge-keymaster -d /path/to/data activate -n primary
  splurge-keymaster -d /path/to/data select -n backup

  # Reactivate every key
  splurge-keymaster -d /path/to/data reset

  # Inspect the pool
  splurge-keymaster -d /path/to/data --text list
  splurge-keymaster -d /path/to/data --text info -n backup
  splurge-keymaster -d /path/to/data stats

  # Copy the key store file
  splurge-keymaster -d /path/to/data backup -b /path/to/backups
            """,
        )

        # Global arguments
        parser.add_argument(
            "-d",
            "--data-dir",
            default=self._config.data_dir,
            help="Data directory holding the key store (default: platform config dir)",
        )
        parser.add_argument(
            "-f",
            "--store-file",
            default=self._config.store_file_name,
            help="Key store file name inside the data directory (default: keys.json)",
        )
        parser.add_argument(
            "-o",
            "--operator",
            default=self._default_operator(),
            help="Operator id checked against KEYMASTER_ADMIN_IDS (default: current user)",
        )
        parser.add_argument(
            "--pretty",
            action="store_true",
            help="Pretty-print JSON outputs",
        )
        parser.add_argument(
            "--text",
            action="store_true",
            help="Print human-readable text instead of JSON",
        )
        parser.add_argument(
            "--log-level",
            default=self._config.log_level,
            choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            type=str.upper,
            help="Logging level for diagnostics on stderr (default: WARNING)",
        )

        subparsers = parser.add_subparsers(
            dest="command",
            help="Available commands",
        )

        subparsers.add_parser("current", help="Show the current key")
        subparsers.add_parser("next", help="Switch to the next active key")

        exhaust_parser = subparsers.add_parser(
            "exhaust",
            help="Mark a key exhausted and switch to the next active key",
        )
        exhaust_parser.add_argument("-n", "--name", required=True, help="Name of the key")

        activate_parser = subparsers.add_parser(
            "activate",
            help="Return a key to the rotation",
        )
        activate_parser.add_argument("-n", "--name", required=True, help="Name of the key")

        select_parser = subparsers.add_parser(
            "select",
            help="Make a key current",
        )
        select_parser.add_argument("-n", "--name", required=True, help="Name of the key")

        subparsers.add_parser("reset", help="Reactivate all keys and make the first one current")
        subparsers.add_parser("list", help="List all keys in rotation order")

        info_parser = subparsers.add_parser("info", help="Show details of a key")
        info_parser.add_argument("-n", "--name", required=True, help="Name of the key")
        info_parser.add_argument(
            "--reveal",
            action="store_true",
            help="Show the account password unmasked (text output)",
        )

        subparsers.add_parser("stats", help="Show key statistics")

        add_parser = subparsers.add_parser(
            "add",
            help="Add a key (interactive when name or value is omitted)",
        )
        add_parser.add_argument("-n", "--name", help="Unique name for the key")
        add_parser.add_argument("-v", "--value", help="Secret value of the key")
        add_parser.add_argument("-e", "--email", help="Account email (optional)")
        add_parser.add_argument("-pw", "--password", help="Account password (optional)")

        delete_parser = subparsers.add_parser("delete", help="Delete a key")
        delete_parser.add_argument("-n", "--name", required=True, help="Name of the key")

        backup_parser = subparsers.add_parser("backup", help="Copy the key store file")
        backup_parser.add_argument(
            "-b",
            "--backup-dir",
            required=True,
            help="Directory to copy the key store into",
        )

        subparsers.add_parser(
            "data-dir",
            help="Print the data directory path that will be used",
        )

        return parser

    def _configure_logging(self, level: str) -> None:
        """Send library logging to stderr at the requested level."""
        logging.basicConfig(
            level=getattr(logging, level, logging.WARNING),
            stream=sys.stderr,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    def _access_control(self) -> AccessControl:
        """Build the operator allow-list.

        Without configured admin ids the CLI runs in local single-user mode.
        """
        return AccessControl(
            self._config.admin_ids,
            allow_all=self._config.allow_all or not self._config.admin_ids,
        )

    def _get_service(self, args: argparse.Namespace) -> KeyService:
        """Get KeyService instance based on arguments."""
        return self._get_service_with_dependencies(
            data_dir=args.data_dir,
            store_file=args.store_file,
        )

    def _get_service_with_dependencies(
        self,
        *,
        data_dir: str,
        store_file: str | None = None
    ) -> KeyService:
        """Get KeyService instance with explicit dependencies.

        Args:
            data_dir: Directory holding the key store
            store_file: Key store file name (optional)

        Returns:
            KeyService instance

        Raises:
            ValidationError: If the data directory is missing
        """
        if not data_dir or not data_dir.strip():
            raise ValidationError("Data directory (-d/--data-dir) is required")

        file_manager = FileManager(data_dir, store_file_name=store_file)
        return KeyService(StoreService(file_manager))

    def _print_json(self, payload: dict[str, Any]) -> None:
        """Print a JSON payload to stdout."""
        print(json.dumps(payload, indent=2 if self._pretty else None, ensure_ascii=False))

    def _print_error(self, *, message: str, code: str = "error") -> None:
        """Print a JSON error to stderr and exit non-zero."""
        error_obj = {
            "success": False,
            "error_code": code,
            "message": message,
        }
        print(json.dumps(error_obj, indent=2), file=sys.stderr)
        sys.exit(1)

    def _emit(
        self,
        result: ServiceResult,
        payload: dict[str, Any],
        text: str
    ) -> None:
        """Print a service result as JSON or text, or report its failure."""
        if not result.success:
            self._print_error(message=result.message, code=result.error_code or "error")
            return

        if self._text:
            print(text)
        else:
            self._print_json({**result.to_dict(), **payload})

    @staticmethod
    def _key_payload(record: KeyRecord | None) -> dict[str, Any] | None:
        if record is None:
            return None
        return {"name": record.name, "value": record.value}

    @staticmethod
    def _pool_counts(store: KeyStore | None) -> dict[str, int]:
        if store is None:
            return {}
        stats = store.statistics()
        return {"active_count": stats.active, "total_count": stats.total}

    def _handle_current(self, service: KeyService) -> None:
        """Handle current command."""
        result = service.current_key()
        text = formatting.format_active_key(result.key, result.store) if result.success else ""
        self._emit(
            result,
            {"key": self._key_payload(result.key), **self._pool_counts(result.store)},
            text,
        )

    def _handle_next(self, service: KeyService) -> None:
        """Handle next command."""
        result = service.next_key()
        text = (
            formatting.format_active_key(result.key, result.store, title="Next key")
            if result.success else ""
        )
        self._emit(
            result,
            {"key": self._key_payload(result.key), **self._pool_counts(result.store)},
            text,
        )

    def _handle_exhaust(self, service: KeyService, *, name: str) -> None:
        """Handle exhaust command."""
        result = service.exhaust_key(name)
        if result.success and result.key is not None:
            text = result.message + "\n\n" + formatting.format_active_key(
                result.key,
                result.store,
                title="New active key",
            )
        else:
            text = result.message
        self._emit(
            result,
            {
                "exhausted": name,
                "next": self._key_payload(result.key),
                **self._pool_counts(result.store),
            },
            text,
        )

    def _handle_name_command(self, result: ServiceResult, *, name: str) -> None:
        """Handle activate, select and delete commands."""
        payload: dict[str, Any] = {"name": name}
        if result.command == "delete":
            payload["current"] = result.key.name if result.key else None
        self._emit(result, payload, result.message)

    def _handle_reset(self, service: KeyService) -> None:
        """Handle reset command."""
        result = service.reset_all()
        text = result.message
        if result.success and result.key is not None:
            text += "\n\n" + formatting.format_active_key(result.key, result.store)
        self._emit(
            result,
            {"current": result.key.name if result.key else None, **self._pool_counts(result.store)},
            text,
        )

    def _handle_list(self, service: KeyService) -> None:
        """Handle list command."""
        result = service.list_keys()
        store = result.store or KeyStore()
        keys = []
        for record in store:
            entry = record.to_dict()
            entry.pop("value")
            entry.pop("password", None)
            keys.append(entry)
        self._emit(
            result,
            {"count": len(keys), "keys": keys},
            formatting.format_key_list(store),
        )

    def _handle_info(self, service: KeyService, *, name: str, reveal: bool) -> None:
        """Handle info command."""
        result = service.key_info(name)
        text = formatting.format_key_info(result.key, reveal_password=reveal) if result.key else ""
        self._emit(
            result,
            {"key": result.key.to_dict() if result.key else None},
            text,
        )

    def _handle_stats(self, service: KeyService) -> None:
        """Handle stats command."""
        result = service.statistics()
        text = formatting.format_statistics(result.statistics) if result.statistics else ""
        self._emit(
            result,
            {"statistics": result.statistics.to_dict() if result.statistics else None},
            text,
        )

    def _handle_add(self, service: KeyService, args: argparse.Namespace) -> None:
        """Handle add command."""
        draft = KeyDraft(
            name=args.name,
            value=args.value,
            email=args.email,
            password=args.password,
        )

        if draft.name is None or draft.value is None:
            draft = self._run_add_wizard(service, operator=args.operator, preset=draft)
            if draft is None:
                return

        result = service.add_key(
            draft.name,
            draft.value,
            email=draft.email,
            password=draft.password,
        )
        self._emit(
            result,
            {"name": draft.name, "current": bool(result.key and result.key.current)},
            result.message,
        )

    def _run_add_wizard(
        self,
        service: KeyService,
        *,
        operator: str | None,
        preset: KeyDraft
    ) -> KeyDraft | None:
        """Collect missing add-key fields from stdin.

        Fields already given on the command line answer their wizard step
        without prompting; an invalid one is asked for again.

        Args:
            service: Key service used to reject duplicate names early
            operator: Operator id owning the wizard session
            preset: Fields given on the command line

        Returns:
            Completed KeyDraft, or None if the wizard was cancelled
        """
        owner = operator or "local"
        session = self._sessions.start(owner)
        store = service.list_keys().store
        answers = {
            STEP_NAME: preset.name,
            STEP_VALUE: preset.value,
            STEP_EMAIL: preset.email,
            STEP_PASSWORD: preset.password,
        }

        try:
            while not session.is_complete:
                answer = answers.pop(session.step, None)
                if answer is None:
                    print(session.prompt, end=" ", file=sys.stderr, flush=True)
                    answer = sys.stdin.readline()
                    if answer == "":
                        raise EOFError
                try:
                    self._sessions.submit(owner, answer, store=store)
                except ValidationError as e:
                    print(str(e), file=sys.stderr)
            return self._sessions.finish(owner)
        except (EOFError, KeyboardInterrupt):
            self._sessions.cancel(owner)
            self._print_error(message="Add-key wizard cancelled", code="cancelled")
            return None

    def _handle_backup(self, args: argparse.Namespace) -> None:
        """Handle backup command."""
        file_manager = FileManager(args.data_dir, store_file_name=args.store_file)
        target = StoreService(file_manager).backup(args.backup_dir)
        self._print_json({
            "success": True,
            "command": "backup",
            "backup_file": str(target) if target else None,
        })

    def run(self, args: Optional[list[str]] = None) -> None:
        """Run the CLI with given arguments."""
        try:
            parsed_args = self._parser.parse_args(args)
            self._pretty = bool(getattr(parsed_args, "pretty", False))
            self._text = bool(getattr(parsed_args, "text", False))
            self._configure_logging(parsed_args.log_level)

            if not parsed_args.command:
                self._print_error(message="No command specified", code="missing_command")
                return

            if parsed_args.command == "data-dir":
                self._print_json({
                    "success": True,
                    "command": "data-dir",
                    "data_dir": parsed_args.data_dir,
                })
                return

            self._access_control().require(parsed_args.operator)
            service = self._get_service(parsed_args)
            command = parsed_args.command

            if command == "current":
                self._handle_current(service)
            elif command == "next":
                self._handle_next(service)
            elif command == "exhaust":
                self._handle_exhaust(service, name=parsed_args.name)
            elif command == "activate":
                self._handle_name_command(service.activate_key(parsed_args.name), name=parsed_args.name)
            elif command == "select":
                self._handle_name_command(service.select_key(parsed_args.name), name=parsed_args.name)
            elif command == "delete":
                self._handle_name_command(service.delete_key(parsed_args.name), name=parsed_args.name)
            elif command == "reset":
                self._handle_reset(service)
            elif command == "list":
                self._handle_list(service)
            elif command == "info":
                self._handle_info(service, name=parsed_args.name, reveal=parsed_args.reveal)
            elif command == "stats":
                self._handle_stats(service)
            elif command == "add":
                self._handle_add(service, parsed_args)
            elif command == "backup":
                self._handle_backup(parsed_args)
            else:
                self._print_error(message=f"Unknown command: {command}", code="unknown_command")

        except AuthorizationError as e:
            self._print_error(message=str(e), code="unauthorized")
        except ValidationError as e:
            self._print_error(message=str(e), code="validation_error")
        except FileOperationError as e:
            self._print_error(message=str(e), code="persistence_failure")
        except KeyboardInterrupt:
            self._print_error(message="Operation cancelled by user", code="cancelled")


def main() -> None:
    """Main entry point for the CLI."""
    cli = KeymasterCLI()
    cli.run()


if __name__ == "__main__":
    main()
