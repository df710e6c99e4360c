import os
import sys
import tempfile

# Ensure repository root is on sys.path so `import narrative_engine` works under pytest
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# Keep the module-level engine away from ./local.db
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(tempfile.gettempdir(), "narrative_engine_test.db")
