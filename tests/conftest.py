# tests/conftest.py
# Ensure the project root (the folder that contains 'cowlang' and 'tests') is on
# sys.path so `import cowlang` works without an editable install.

import sys
import pathlib

ROOT = pathlib.Path(__file__).resolve().parents[1]
ROOT_STR = str(ROOT)

if ROOT_STR not in sys.path:
    sys.path.insert(0, ROOT_STR)

# Sanity check: make sure 'cowlang' is importable and looks like a package
try:
    import cowlang  # noqa: F401
except Exception as e:
    has_pkg = (ROOT / "cowlang" / "__init__.py").is_file()
    raise RuntimeError(
        f"Failed to import 'cowlang' from {ROOT_STR}. "
        f"cowlang/__init__.py exists: {has_pkg}"
    ) from e
