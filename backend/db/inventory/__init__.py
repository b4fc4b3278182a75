"""
Stock held per store.

Models:
- ProductAvailability (quantity of one product in one store; append-only rows,
  several rows may exist for the same product/store pair)
"""
