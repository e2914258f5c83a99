"""Built-in fitness article sources crawled when no store exists."""

DEFAULT_SOURCES: tuple[str, ...] = (
    "https://www.mayoclinic.org/healthy-lifestyle/fitness/in-depth/exercise/art-20048389",
    "https://www.acefitness.org/resources/everyone/exercise-library/",
    "https://www.bodybuilding.com/content/beginner-workout-routine.html",
    "https://www.menshealth.com/fitness/a19516867/beginner-workout-plan/",
    "https://www.womenshealthmag.com/fitness/a19965867/beginner-workout-plan/",
    "https://www.yogajournal.com/practice/beginners/",
    "https://www.crossfit.com/essentials/",
)
