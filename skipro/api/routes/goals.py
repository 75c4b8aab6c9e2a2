"""
Training goal catalog endpoint.

The catalog is static; the client renders it as the goal picker for
whichever discipline is selected.
"""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from ...core.coaching.goals import Discipline, TrainingGoal, group_by_category
from ..dependencies import AuthenticatedUser

router = APIRouter()


class GoalItem(BaseModel):
    id: str
    discipline: Discipline
    category: str
    title: str
    label: str = Field(description='Display label, e.g. "Ski - Carving"')
    description: str
    key_points: list[str]

    @classmethod
    def from_goal(cls, goal: TrainingGoal) -> "GoalItem":
        return cls(
            id=goal.id,
            discipline=goal.discipline,
            category=goal.category.value,
            title=goal.title,
            label=goal.label,
            description=goal.description,
            key_points=list(goal.key_points),
        )


class GoalCategoryGroup(BaseModel):
    category: str
    goals: list[GoalItem]


class GoalCatalogResponse(BaseModel):
    discipline: Discipline
    categories: list[GoalCategoryGroup]


@router.get(
    "",
    response_model=GoalCatalogResponse,
    summary="List training goals",
    description="Goals for one discipline, grouped beginner to advanced",
)
async def list_goals(
    api_key: AuthenticatedUser,
    discipline: Discipline = Discipline.SKI,
) -> GoalCatalogResponse:
    grouped = group_by_category(discipline)
    return GoalCatalogResponse(
        discipline=discipline,
        categories=[
            GoalCategoryGroup(
                category=category.value,
                goals=[GoalItem.from_goal(g) for g in goals],
            )
            for category, goals in grouped.items()
        ],
    )
