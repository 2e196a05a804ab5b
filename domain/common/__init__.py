"""领域层通用基础模块"""
