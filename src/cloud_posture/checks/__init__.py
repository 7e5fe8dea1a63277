"""Reference security checks built on the core"""
