# material_ops/utils/__init__.py
