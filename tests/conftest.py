import sys
import tempfile
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from attendit.infrastructure.logger import configure_log_file

# Keep test runs from appending to the project log file
configure_log_file(str(Path(tempfile.mkdtemp(prefix="attendit-tests-")) / "test.log"))
