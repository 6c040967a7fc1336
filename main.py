#!/usr/bin/env python3
"""
quotefit - 命令行启动脚本
"""

from quotefit.cli import app

if __name__ == "__main__":
    app()
