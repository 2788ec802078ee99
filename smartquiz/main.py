import logging

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

from smartquiz.config import configure_logging
from smartquiz.errors import QuizError
from smartquiz.models import EvaluateRequest, Quiz, QuizRequest, ScoreReport
from smartquiz.scoring import evaluate
from smartquiz.services import QuizGenerator

# Load environment variables
load_dotenv()
configure_logging()

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Smart Quiz API",
    description="Generate AI-powered quizzes on any topic and score the answers",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize service lazily to avoid startup errors
quiz_generator = None


def get_generator() -> QuizGenerator:
    global quiz_generator
    if quiz_generator is None:
        quiz_generator = QuizGenerator()
    return quiz_generator


@app.exception_handler(QuizError)
async def quiz_error_handler(request: Request, exc: QuizError):
    logger.error(f"{request.url.path} failed with {type(exc).__name__}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": QuizError.message})


@app.get("/")
async def root():
    return {
        "message": "Smart Quiz API",
        "status": "running",
        "endpoints": {
            "generate_quiz": "/api/quiz/generate",
            "evaluate_quiz": "/api/quiz/evaluate"
        }
    }


@app.get("/health")
async def health():
    return {"status": "healthy"}


@app.post("/api/quiz/generate", response_model=Quiz)
async def generate_quiz(request: QuizRequest, generator: QuizGenerator = Depends(get_generator)):
    """
    Generate a multiple-choice quiz on a topic

    - **topic**: Subject for the quiz (e.g., "Photosynthesis")
    """
    return await generator.generate(request.topic)


@app.post("/api/quiz/evaluate", response_model=ScoreReport)
async def evaluate_quiz(request: EvaluateRequest):
    """
    Score answers against a previously generated quiz

    - **quizData**: `{"questions": [...]}` or the bare question list
    - **userAnswers**: selected option index per question, `null` if unanswered
    """
    return evaluate(request.quiz_data, request.user_answers)


def main():
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
