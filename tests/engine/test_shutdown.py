import os
import subprocess
import sys
import textwrap

SESSION_SCRIPT = textwrap.dedent(
    """
    import numpy as np
    from numba import threading_layer

    from pymeandiff import InteractiveDifferenceOfMean, Region

    image = np.arange(64, dtype=np.uint8).reshape(8, 8)
    engine = InteractiveDifferenceOfMean(image)
    engine.start()
    engine.on_drag(Region(0, 0, 6, 6), False)
    assert engine.painter.wait_until_idle(60)
    engine.confirm()
    assert not engine.painter.is_running
    print(threading_layer())
    """
)


def test_process_exits_after_interactive_session():
    env = dict(os.environ)
    env.pop("NUMBA_THREADING_LAYER", None)

    result = subprocess.run(
        [sys.executable, "-c", SESSION_SCRIPT],
        env=env,
        capture_output=True,
        text=True,
        timeout=300,
    )

    assert result.returncode == 0, result.stderr
    assert result.stdout.strip() == "workqueue"
