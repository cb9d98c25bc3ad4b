"""
Shared Kernel

Value objects, aggregate base classes, domain exceptions and the unit of
work used by the pricing and booking contexts.
"""
