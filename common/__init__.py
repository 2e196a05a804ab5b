"""跨层通用工具"""
