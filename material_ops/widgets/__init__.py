# material_ops/widgets/__init__.py
