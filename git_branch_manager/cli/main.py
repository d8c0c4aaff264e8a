"""Command-line interface for git-branch-manager"""

import sys

import uvicorn
from rich.console import Console

from git_branch_manager.api import create_app
from git_branch_manager.cli.args import parse_args
from git_branch_manager.config import load_config
from git_branch_manager.utils.logging import setup_logging

console = Console()


def main(argv=None):
    """Main entry point for the application."""
    parsed_args = parse_args(argv)
    try:
        # Setup logging before anything logs
        setup_logging(
            verbose=parsed_args.verbose,
            debug=parsed_args.debug,
            log_file=parsed_args.log_file,
        )

        config = load_config(
            parsed_args.config,
            repository_path=parsed_args.repo,
            host=parsed_args.host,
            port=parsed_args.port,
            static_dir=parsed_args.static_dir,
            verify_remote=False if parsed_args.no_verify_remote else None,
            verbose=parsed_args.verbose,
            debug=parsed_args.debug,
        )

        if parsed_args.debug:
            console.print("[yellow]Debug mode enabled[/yellow]")
            console.print("[yellow]Configuration:[/yellow]")
            for key, value in config.to_dict().items():
                console.print(f"  {key}: {value}")

        console.print(
            f"Git Branch Manager running on [cyan]http://{config.host}:{config.port}[/cyan] "
            f"for [cyan]{config.repository_path}[/cyan]"
        )

        app = create_app(config)
        # log_config=None keeps uvicorn on the handlers set up above
        uvicorn.run(app, host=config.host, port=config.port, log_config=None)
        return 0
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        if parsed_args.debug:
            console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
