"""
env-doctor - .env 文件诊断工具

比较、审计、检查并修复环境变量文件。
"""

__version__ = "0.3.0"
