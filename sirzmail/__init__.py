"""
Sirz Mail - AI-assisted email template editor built on NiceGUI.
"""
