#!/usr/bin/env python3
"""Direct launcher for the paycheck planner dashboard.

Launches Streamlit on ``paycheck_planner/dashboard.py`` from the project
root so the package imports resolve without installation.
"""

import subprocess
import sys
from pathlib import Path

project_root = Path(__file__).parent.resolve()
dashboard_path = project_root / "paycheck_planner" / "dashboard.py"

if __name__ == "__main__":
    raise SystemExit(subprocess.call(
        [sys.executable, "-m", "streamlit", "run", str(dashboard_path), *sys.argv[1:]],
        cwd=str(project_root),
    ))
