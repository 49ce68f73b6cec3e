import os

# Qt widgets are created headless in the ui tests
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
