"""
Convert parsed task arguments back into command-line flags.
"""

import re
import shlex
from typing import Any, Iterable, List, Mapping


def _kebab(key: str) -> str:
    key = re.sub(r"([a-z0-9])([A-Z])", r"\1-\2", key)
    return key.replace("_", "-").lower()


def _quote(value: Any) -> str:
    return shlex.quote(str(value))


def to_flag_list(
    argv: Mapping[str, Any],
    allow_single_flags: bool = True,
    excludes: Iterable[str] = (),
) -> List[str]:
    """Build a list of flags from ``argv``.

    - ``True`` becomes ``--key``, ``False`` becomes ``--no-key``
    - ``None`` values are skipped
    - lists and tuples repeat the flag once per element
    - with ``allow_single_flags``, one-letter keys use ``-k value``
    - positional values under ``"_"`` are appended last unless ``"_"`` is
      excluded
    """
    excluded = set(excludes)
    flags: List[str] = []

    for key, value in argv.items():
        if key == "_" or key in excluded or value is None:
            continue

        single = allow_single_flags and len(key) == 1
        name = f"-{key}" if single else f"--{_kebab(key)}"

        values = value if isinstance(value, (list, tuple)) else [value]
        for item in values:
            if item is True:
                flags.append(name)
            elif item is False:
                if not single:
                    flags.append(f"--no-{_kebab(key)}")
            elif single:
                flags.extend([name, _quote(item)])
            else:
                flags.append(f"{name}={_quote(item)}")

    positionals = argv.get("_")
    if "_" not in excluded and positionals:
        flags.extend(_quote(item) for item in positionals)

    return flags


def to_flags(
    argv: Mapping[str, Any],
    allow_single_flags: bool = True,
    excludes: Iterable[str] = (),
) -> str:
    """Build a shell-ready flags string from ``argv``.

    Example:
        >>> to_flags({"watch": True, "outDir": "dist", "n": 3, "_": ["src"]})
        '--watch --out-dir=dist -n 3 src'
    """
    return " ".join(to_flag_list(argv, allow_single_flags, excludes))
