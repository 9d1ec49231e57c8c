#!/usr/bin/env python3
"""
Script to run black and mypy on the submanager package.
"""
import argparse
import os
import subprocess
import sys

PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
PACKAGE_DIR = os.path.join(PROJECT_ROOT, "submanager")


def run_black(check=False):
    """Run black on the package and its tests"""
    print("Running black on submanager...")
    command = ["black", PACKAGE_DIR, os.path.join(PROJECT_ROOT, "tests")]
    if check:
        command.append("--check")
    try:
        subprocess.run(command, check=True)
        print("Black formatting completed successfully!")
        return 0
    except subprocess.CalledProcessError as e:
        print(f"Error running black: {e}")
        return 1


def run_mypy(strict=False):
    """Run mypy on the package; gradual mode unless strict is requested"""
    print("Running mypy on submanager...")
    command = ["mypy"]
    if strict:
        command.extend(["--disallow-untyped-defs", "--disallow-incomplete-defs"])
    else:
        command.extend(["--ignore-missing-imports", "--follow-imports=silent"])
    command.append(PACKAGE_DIR)
    try:
        subprocess.run(command, check=True)
        print("Mypy type checking completed successfully!")
        return 0
    except subprocess.CalledProcessError as e:
        print(f"Error running mypy: {e}")
        return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Format and type-check submanager")
    parser.add_argument("--check", action="store_true", help="Only report files black would change")
    parser.add_argument("--strict", action="store_true", help="Run mypy with untyped defs disallowed")
    args = parser.parse_args()

    black_result = run_black(args.check)
    mypy_result = run_mypy(args.strict)
    sys.exit(black_result or mypy_result)  # Exit with error if either tool failed
