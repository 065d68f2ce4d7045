# material_ops/modules/__init__.py
