import logging
import sys
from pathlib import Path

# Go up to the parent directory (..), then down into "scripts"
# This adds "../scripts" to the python search path
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "scripts"))

# Now run_orbit is directly visible to Python
from run_orbit import run

logging.basicConfig(level=logging.INFO)

run(
    problem_name="figure_eight",
    periods=1.0,
    integrator="quinlan_tremaine_1990_order_8",
    step=1e-3,
    save="data/computations/figure_eight_QT8.npz",
    plot="data/computations/figure_eight_QT8.png",
)
