"""競馬データ バッチ取り込みパイプライン"""

__version__ = "0.1.0"
