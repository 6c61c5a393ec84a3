"""pkgsync utilities."""

from pkgsync.utils.console import (
    console,
    print_banner,
    print_error,
    print_package_line,
    print_success,
)
from pkgsync.utils.files import (
    make_absolute,
    make_relative,
    read_file,
    write_file,
)

__all__ = [
    "console",
    "make_absolute",
    "make_relative",
    "print_banner",
    "print_error",
    "print_package_line",
    "print_success",
    "read_file",
    "write_file",
]
