from ptcoach.models.user import FitnessProfile, Supervision, User
from ptcoach.models.trainee_request import TraineeRequest
from ptcoach.models.workout import ExerciseProgress, TemplateExercise, WorkoutAssignment, WorkoutTemplate


__all__ = [
    "User",
    "FitnessProfile",
    "Supervision",
    "TraineeRequest",
    "WorkoutTemplate",
    "TemplateExercise",
    "WorkoutAssignment",
    "ExerciseProgress",
]
