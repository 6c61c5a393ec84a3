"""Registration of the generated factory with the host autoloader.

After the host package manager dumps its autoloader, the generated factory
class has to be made available to it: the factory's fully-qualified name
is exposed as a constant in the autoloader bootstrap, and the class is
added to the autoloader's class map.
"""

import ast
import json
import logging
import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from rich.console import Console

from pkgsync.models.config import PluginConfig
from pkgsync.models.manifest import JSON_INDENT
from pkgsync.services.rebuild import OneShotGuard
from pkgsync.utils.console import console, print_banner
from pkgsync.utils.files import make_absolute, make_relative, read_file, write_file

logger = logging.getLogger(__name__)

FACTORY_CONSTANT = "PKGSYNC_FACTORY_CLASS"

_CONSTANT_LINE = re.compile(rf"^{FACTORY_CONSTANT} = .*(?:\n|\Z)", re.MULTILINE)


class FactoryRegistrationError(Exception):
    """Base class for artifacts missing or invalid during factory registration.

    Attributes:
        path: The offending file.
    """

    description = "file"

    def __init__(self, path: Path | str, problem: str = "was not found") -> None:
        """Initialize the error.

        Args:
            path: The offending file.
            problem: What is wrong with it.
        """
        self.path = path
        super().__init__(f"The {self.description} {path} {problem}.")


class FactoryFileNotFoundError(FactoryRegistrationError):
    """Raised when the generated factory module does not exist."""

    description = "factory file"


class AutoloadFileNotFoundError(FactoryRegistrationError):
    """Raised when the autoloader bootstrap does not exist."""

    description = "autoloader bootstrap"


class ClassMapFileNotFoundError(FactoryRegistrationError):
    """Raised when the autoloader class map does not exist."""

    description = "class map"


class ClassMapFileInvalidError(FactoryRegistrationError):
    """Raised when the autoloader class map is not a JSON object."""

    description = "class map"

    def __init__(self, path: Path | str, reason: str) -> None:
        """Initialize the error.

        Args:
            path: The unreadable class map.
            reason: Why it could not be parsed.
        """
        self.reason = reason
        super().__init__(path, f"is invalid: {reason}")


def _insertion_line(source: str) -> int:
    """Return the line after the docstring and __future__ imports.

    Falls back to the top of the file if the bootstrap cannot be parsed.
    """
    try:
        module = ast.parse(source)
    except SyntaxError:
        return 0

    line = 0
    for index, node in enumerate(module.body):
        is_docstring = (
            index == 0
            and isinstance(node, ast.Expr)
            and isinstance(node.value, ast.Constant)
            and isinstance(node.value.value, str)
        )
        is_future = isinstance(node, ast.ImportFrom) and node.module == "__future__"
        if not (is_docstring or is_future):
            break
        line = node.end_lineno or line
    return line


def insert_factory_constant(source: str, factory_class: str) -> str:
    """Define the factory constant in an autoloader bootstrap.

    A definition left by a previous run is replaced in place.

    Args:
        source: Bootstrap source.
        factory_class: Fully-qualified factory class name.

    Returns:
        The updated source.
    """
    definition = f"{FACTORY_CONSTANT} = {json.dumps(factory_class)}\n"

    if _CONSTANT_LINE.search(source):
        return _CONSTANT_LINE.sub(lambda _: definition, source, count=1)

    lines = source.splitlines(keepends=True)
    if lines and not lines[-1].endswith("\n"):
        lines[-1] += "\n"
    position = _insertion_line(source)
    lines.insert(position, definition)
    return "".join(lines)


def insert_class_map_entry(source: str, factory_class: str, factory_path: str) -> str:
    """Add the factory to a JSON class map.

    Existing entries keep their order; an existing factory entry is updated.

    Args:
        source: Class map JSON.
        factory_class: Fully-qualified factory class name.
        factory_path: Path of the factory module.

    Returns:
        The updated class map JSON.

    Raises:
        ValueError: If the class map is not a JSON object.
    """
    class_map = json.loads(source) if source.strip() else {}
    if not isinstance(class_map, dict):
        raise ValueError("class map must be a JSON object")
    class_map[factory_class] = factory_path
    return json.dumps(class_map, indent=JSON_INDENT, ensure_ascii=False) + "\n"


class FactoryRegistrar(BaseModel):
    """Registers the generated factory with the autoloader, once per process.

    Attributes:
        root_dir: Project root.
        autoload_file: Autoloader bootstrap module.
        class_map_file: Autoloader class map.
        output: Console progress lines are written to.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    root_dir: Path
    autoload_file: Path
    class_map_file: Path
    output: Console = Field(default_factory=lambda: console)

    def register(self, config: PluginConfig, guard: OneShotGuard) -> bool:
        """Expose the factory constant and add the factory to the class map.

        The guard is set only once both artifacts were updated; on failure
        the step can be attempted again.

        Args:
            config: Plugin configuration naming the factory.
            guard: The factory registration guard.

        Returns:
            True if registration ran.

        Raises:
            FactoryFileNotFoundError: If the factory module does not exist.
            AutoloadFileNotFoundError: If the autoloader bootstrap does not exist.
            ClassMapFileNotFoundError: If the class map does not exist.
            ClassMapFileInvalidError: If the class map is not a JSON object.
        """
        if guard.done:
            logger.debug("Factory already registered in this process, skipping")
            return False

        factory_file = make_absolute(config.factory_file, self.root_dir)
        if not factory_file.is_file():
            raise FactoryFileNotFoundError(factory_file)

        if not self.autoload_file.is_file():
            raise AutoloadFileNotFoundError(self.autoload_file)

        print_banner(self.output, "Generating factory-class constant")
        bootstrap = read_file(self.autoload_file)
        write_file(self.autoload_file, insert_factory_constant(bootstrap, config.factory_class))
        logger.info(f"Defined {FACTORY_CONSTANT} in {self.autoload_file}")

        if not self.class_map_file.is_file():
            raise ClassMapFileNotFoundError(self.class_map_file)

        try:
            class_map = insert_class_map_entry(
                read_file(self.class_map_file),
                config.factory_class,
                make_relative(factory_file, self.root_dir),
            )
        except ValueError as e:
            raise ClassMapFileInvalidError(self.class_map_file, str(e)) from e

        print_banner(
            self.output,
            f"Registering {config.factory_class} with the class-map autoloader",
        )
        write_file(self.class_map_file, class_map)
        logger.info(f"Registered {config.factory_class} in {self.class_map_file}")

        guard.set()
        return True
