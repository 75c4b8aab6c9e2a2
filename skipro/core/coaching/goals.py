"""
Training goal catalog.

Goals are grouped by discipline and progression stage. The order of
the catalog matters: the first goal of a discipline is the default
whenever the user switches to it.
"""

from dataclasses import dataclass
from enum import Enum


class Discipline(Enum):
    SKI = "SKI"
    SNOWBOARD = "SNOWBOARD"

    @property
    def label(self) -> str:
        return "Ski" if self is Discipline.SKI else "Snowboard"


class GoalCategory(Enum):
    """Progression stage a goal belongs to."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


@dataclass(frozen=True)
class TrainingGoal:
    """A technique the user wants feedback on."""
    id: str
    discipline: Discipline
    category: GoalCategory
    title: str
    description: str
    key_points: tuple[str, ...]

    @property
    def label(self) -> str:
        """Goal label sent to the coach, e.g. "Ski - Carving"."""
        return f"{self.discipline.label} - {self.title}"


class UnknownGoalError(ValueError):
    """Raised for a goal id that is not in the catalog."""
    pass


SKI_GOALS: tuple[TrainingGoal, ...] = (
    # --- Ski ---
    TrainingGoal(
        id="ski-beg-adapt",
        discipline=Discipline.SKI,
        category=GoalCategory.BEGINNER,
        title="Getting started",
        description="Putting skis on and off, walking on the flat, step turns.",
        key_points=("Balance", "Edge awareness", "Centre of mass control"),
    ),
    TrainingGoal(
        id="ski-beg-plow-stop",
        discipline=Discipline.SKI,
        category=GoalCategory.BEGINNER,
        title="Snowplough stop",
        description="Slowing down and stopping by pushing snow with the ski tails.",
        key_points=("Tail push", "Knees in", "Even pressure"),
    ),
    TrainingGoal(
        id="ski-beg-plow-turn",
        discipline=Discipline.SKI,
        category=GoalCategory.BEGINNER,
        title="Snowplough turn",
        description="Basic left and right turns by shifting your weight.",
        key_points=("Weight transfer", "Outside ski loaded", "Body rotation"),
    ),
    TrainingGoal(
        id="ski-int-semi-para",
        discipline=Discipline.SKI,
        category=GoalCategory.INTERMEDIATE,
        title="Stem christie",
        description="Enter the turn in a plough and finish it parallel.",
        key_points=("Matching skis in the turn", "Smooth weight transfer", "Edge change"),
    ),
    TrainingGoal(
        id="ski-int-para",
        discipline=Discipline.SKI,
        category=GoalCategory.INTERMEDIATE,
        title="Basic parallel turn",
        description="Parallel all the way through, practising extension and release.",
        key_points=("Skis parallel", "Up-and-down extension", "Pressure release"),
    ),
    TrainingGoal(
        id="ski-int-pole",
        discipline=Discipline.SKI,
        category=GoalCategory.INTERMEDIATE,
        title="Pole planting",
        description="Build rhythm and stability with timed pole plants.",
        key_points=("Plant position", "Timing", "Arm posture"),
    ),
    TrainingGoal(
        id="ski-adv-carving",
        discipline=Discipline.SKI,
        category=GoalCategory.ADVANCED,
        title="Carving",
        description="Clean railed tracks using the ski's sidecut.",
        key_points=("Pure edge", "Inclination", "Resisting centripetal force"),
    ),
    TrainingGoal(
        id="ski-adv-gs",
        discipline=Discipline.SKI,
        category=GoalCategory.ADVANCED,
        title="Giant slalom",
        description="Maximum control at race speed.",
        key_points=("High-speed stability", "Deep angulation", "Continuous pressure"),
    ),

    # --- Snowboard ---
    TrainingGoal(
        id="sb-beg-skating",
        discipline=Discipline.SNOWBOARD,
        category=GoalCategory.BEGINNER,
        title="Skating",
        description="Balancing with one foot strapped to the board.",
        key_points=("Centred stance", "Look where you go", "Back foot push"),
    ),
    TrainingGoal(
        id="sb-beg-slipping",
        discipline=Discipline.SNOWBOARD,
        category=GoalCategory.BEGINNER,
        title="Side slipping",
        description="Controlling speed on the heel and toe edges.",
        key_points=("Ankle control", "Eyes up", "Engaged core"),
    ),
    TrainingGoal(
        id="sb-beg-leaf",
        discipline=Discipline.SNOWBOARD,
        category=GoalCategory.BEGINNER,
        title="Falling leaf",
        description="Traversing left and right across the slope.",
        key_points=("Lateral weight shift", "Lead with your eyes", "Soft knees"),
    ),
    TrainingGoal(
        id="sb-int-turns",
        discipline=Discipline.SNOWBOARD,
        category=GoalCategory.INTERMEDIATE,
        title="C and S turns",
        description="Smooth edge changes between toe and heel side.",
        key_points=("Edge change timing", "Body rotation", "Weight shift"),
    ),
    TrainingGoal(
        id="sb-int-carve",
        discipline=Discipline.SNOWBOARD,
        category=GoalCategory.INTERMEDIATE,
        title="Basic carving",
        description="First steps at cutting the snow rather than skidding.",
        key_points=("Edge angle", "Edge grip", "Stable centre of mass"),
    ),
    TrainingGoal(
        id="sb-int-weight",
        discipline=Discipline.SNOWBOARD,
        category=GoalCategory.INTERMEDIATE,
        title="Weight shifting",
        description="Adjusting your weight dynamically as the slope changes.",
        key_points=("Front/back balance", "Dynamic adjustment", "Pressing the board"),
    ),
    TrainingGoal(
        id="sb-adv-euro",
        discipline=Discipline.SNOWBOARD,
        category=GoalCategory.ADVANCED,
        title="Euro carve",
        description="Extreme angulation with a hand touching the snow.",
        key_points=("Extreme angulation", "Deep body arch", "Hand on snow"),
    ),
    TrainingGoal(
        id="sb-adv-tricks",
        discipline=Discipline.SNOWBOARD,
        category=GoalCategory.ADVANCED,
        title="Ground tricks",
        description="Spins and balance using the board's flex.",
        key_points=("Board flex", "Pop timing", "Body position in the air"),
    ),
)


def goals_for(discipline: Discipline) -> list[TrainingGoal]:
    return [g for g in SKI_GOALS if g.discipline == discipline]


def default_goal(discipline: Discipline) -> TrainingGoal:
    """First goal in catalog order for a discipline."""
    return goals_for(discipline)[0]


def get_goal(goal_id: str) -> TrainingGoal:
    for goal in SKI_GOALS:
        if goal.id == goal_id:
            return goal
    raise UnknownGoalError(f"Unknown goal: {goal_id}")


def group_by_category(discipline: Discipline) -> dict[GoalCategory, list[TrainingGoal]]:
    """Goals of one discipline grouped by stage, stages in progression order."""
    grouped: dict[GoalCategory, list[TrainingGoal]] = {}
    for goal in goals_for(discipline):
        grouped.setdefault(goal.category, []).append(goal)
    return grouped
