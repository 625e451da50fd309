"""
Entry point for the Promo ROI Calculator.

Usage:
    python main.py          # launches the web app at localhost:5000
    python main.py --cli    # runs the terminal interface
"""

import argparse


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Promo ROI Calculator: uplift, churn and bonus cost",
    )
    parser.add_argument(
        "--cli",
        action="store_true",
        help="Run in terminal mode instead of launching the web app",
    )
    parser.add_argument(
        "--no-debug",
        action="store_true",
        help="Start the web app without the Flask debugger and reloader",
    )
    args = parser.parse_args()

    if args.cli:
        from cli import run_cli
        run_cli()
    else:
        from app import run_web
        run_web(debug=not args.no_debug)


if __name__ == "__main__":
    main()
