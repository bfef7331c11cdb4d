import logging
import sys
from pathlib import Path

# Go up to the parent directory (..), then down into "scripts"
# This adds "../scripts" to the python search path
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "scripts"))

from run_orbit import run

## THIS SCRIPT SOLVES THE BINARY WITH THE STARTUP METHOD ALONE, FOR COMPARISON WITH THE MULTISTEP RUN

problem = "two_body_circular"
integrator = "yoshida_1990_order_6"

##############################################################################################

logging.basicConfig(level=logging.INFO)

run(
    problem_name=problem,
    periods=10.0,
    integrator=integrator,
    step=1e-2,
    save=f"data/computations/{problem}_{integrator}.npz",
)
