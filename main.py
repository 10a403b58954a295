"""
Polaris CLI 入口点

    python main.py issues --project-id <id>

安装后等价于 `polaris` 命令。
"""

import sys

from polaris.cli import main

if __name__ == "__main__":
    sys.exit(main())
