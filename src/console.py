"""Color-coded status lines for operator-facing output."""

from colorama import Fore, Style


def info(message):
    print(message)


def progress(message):
    print(f"{Fore.YELLOW}{message}{Style.RESET_ALL}")


def success(message):
    print(f"{Fore.GREEN}{message}{Style.RESET_ALL}")


def warning(message):
    print(f"{Fore.YELLOW}WARNING: {message}{Style.RESET_ALL}")


def error(message):
    print(f"{Fore.RED}ERROR: {message}{Style.RESET_ALL}")
