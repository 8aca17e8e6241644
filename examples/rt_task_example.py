"""
Response-Time Task Example

Builds a small multi-task session in code and runs it.

This example shows:
1. Creating the top-level node with start/finish call lists
2. Adding one child node per task, each repeating a trial leaf
3. Logging trial data through the DataLog, saved as a finish action
4. Running the session with ExperimentRunner and reading the result

Tasks are given as (name, trials) pairs, like:
  [("practice", 4), ("speed", 10), ("accuracy", 10)]
The speed and accuracy tasks run their trials in random order.
"""

import random
import sys
import tempfile
import time
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from psytree import CallableLeaf, ExperimentRunner, create_top_node
from psytree.config import RunnerSettings
from psytree.data import DataLog

TASK_SPECS = [("practice", 4), ("speed", 10), ("accuracy", 10)]
COHERENCES = [0.0, 3.2, 6.4, 12.8, 25.6, 51.2]


def make_trial(task, data_log, rng):
    """Leaf simulating one dots trial: draw a coherence, 'respond', log it."""
    def trial():
        coherence = rng.choice(COHERENCES)
        rt = 0.3 + rng.random() * (1.0 - coherence / 100.0)
        correct = rng.random() < 0.5 + coherence / 100.0
        time.sleep(0.001)  # stand-in for stimulus presentation
        data_log.log_event(task, 'response', coherence=coherence, rt=round(rt, 3), correct=correct)

    return CallableLeaf("trial", trial)


def build_session(data_log, seed=None):
    """Build the session tree."""
    rng = random.Random(seed)
    session, start_calls, finish_calls = create_top_node("rtDots")

    start_calls.add_call(print, "[Session] screen open", name="open screen")
    finish_calls.add_call(print, "[Session] screen closed", name="close screen")
    finish_calls.add_call(data_log.save, name="save data")  # runs first

    for name, trials in TASK_SPECS:
        task = session.new_child_node(
            name,
            iterations=trials,
            iteration_method="sequential" if name == "practice" else "random",
            node_data={'task_type': 'dots'},
        )
        task.start_action = lambda name=name: print(f"[Task] {name} starting")
        task.add_child(make_trial(task, data_log, rng))

    return session


def main():
    print("=" * 70)
    print("RESPONSE-TIME TASK EXAMPLE")
    print("=" * 70)

    output_dir = tempfile.mkdtemp(prefix="psytree_")
    data_log = DataLog(output_dir, session_name="rt_example")
    session = build_session(data_log, seed=42)

    print()
    print(session.describe())
    print()

    runner = ExperimentRunner(session, RunnerSettings(seed=42))
    result = runner.run()

    print()
    if not result.succeeded:
        print(f"Run failed: {result.failure.format()}")
        return 1

    responses = data_log.to_frame()
    responses = responses[responses['event'] == 'response']
    print(f"Completed {len(responses)} trials in {result.duration:.2f}s")
    print()
    print("Mean RT and accuracy per task:")
    print(responses.groupby('node')[['rt', 'correct']].mean().round(3))
    print()
    print(f"Data written to: {output_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
