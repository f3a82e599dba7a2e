__title__ = "meli-sdk"
__version__ = "0.1.0"
