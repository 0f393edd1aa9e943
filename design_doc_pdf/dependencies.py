"""
Checks for the external tools the converter needs.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import subprocess
import sys

from colorama import Fore, Style


def check_command(cmd: list, description: str) -> bool:
    """Check if a command is available."""
    try:
        subprocess.run(cmd, check=True, capture_output=True)
        print(f"{Fore.GREEN}✓{Style.RESET_ALL} {description} is available")
        return True
    except (subprocess.CalledProcessError, FileNotFoundError):
        print(f"{Fore.RED}✗{Style.RESET_ALL} {description} is not available")
        return False


def check_dependencies() -> bool:
    """Return True when pandoc can be run.

    Playwright is a hard import of the package; its Chromium build is checked
    when the exporter launches it.
    """
    pandoc_available = check_command(["pandoc", "--version"], "Pandoc")
    if not pandoc_available:
        print("Pandoc is required but not found. Please install it from:")
        print("https://pandoc.org/installing.html")
    return pandoc_available


def install_browser() -> bool:
    """Install the Chromium build Playwright drives."""
    print("Installing Playwright Chromium...")
    try:
        subprocess.run(
            [sys.executable, "-m", "playwright", "install", "chromium"],
            check=True, capture_output=True, text=True,
        )
    except subprocess.CalledProcessError as e:
        print(f"{Fore.RED}✗{Style.RESET_ALL} Failed to install Playwright Chromium: {e.stderr}")
        return False
    print(f"{Fore.GREEN}✓{Style.RESET_ALL} Playwright Chromium installed successfully")
    return True
