"""CLI用ユーティリティ"""
