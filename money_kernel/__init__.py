"""
Money Kernel

Currency-aware monetary values with:
- Exact decimal arithmetic and explicit rounding
- Fixed-point 64-bit money with overflow detection
- A composable exchange-rate algebra
- Validated binary serialization
"""

__version__ = "0.1.0"
