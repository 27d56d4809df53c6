from fastapi import FastAPI, HTTPException, Depends, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware
from sqlalchemy.orm import Session
from typing import Optional
import logging

from config import settings
from database import get_db, verify_tables_exist
from exceptions import AIServiceError
from images import DEFAULT_HERO_IMAGE
from models import User
from ai_context import build_discussion_prompt
from auth import get_current_user, login_user, logout_user
from service import process_chat
import crud
import schemas

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(title="Grad Program Finder")

# Ensure database tables exist on startup
@app.on_event("startup")
def startup_event():
    if settings.DATABASE_URL:
        verify_tables_exist()
    else:
        logger.warning("DATABASE_URL not set. Skipping table verification.")

# Global Custom Error Handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Convert 422 to 400 for frontend compatibility."""
    return JSONResponse(
        status_code=400,
        content={"error": "VALIDATION_ERROR", "message": f"Invalid data format: {str(exc)}"},
    )

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

@app.exception_handler(AIServiceError)
async def ai_service_exception_handler(request: Request, exc: AIServiceError):
    logger.error(f"[ERROR] AI provider failure: {str(exc)}")
    return JSONResponse(
        status_code=502,
        content={"error": "AI_SERVICE_ERROR", "message": f"The {exc.provider} service failed. Please try again."},
    )

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions."""
    logger.exception(f"Global Error: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_SERVER_ERROR", "message": "An unexpected error occurred. Please try again."},
    )

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SessionMiddleware, secret_key=settings.SESSION_SECRET, same_site="lax")

def _saved_program_response(program) -> schemas.SavedProgramResponse:
    return schemas.SavedProgramResponse.model_validate(program)

# ============================================
# ENDPOINTS
# ============================================

@app.get("/")
async def health():
    """Health check endpoint."""
    return {"status": "ok", "service": "grad-program-finder"}

# ---------- Session ----------

@app.post("/auth/guest", response_model=schemas.UserResponse)
async def guest_login(request: Request, db: Session = Depends(get_db)):
    """Start a guest session with a fresh anonymous user."""
    user = crud.create_guest_user(db)
    login_user(request, user)
    logger.info(f"[ENDPOINT] /auth/guest created {user.id}")
    return schemas.UserResponse.model_validate(user)

@app.get("/auth/session", response_model=schemas.UserResponse)
async def current_session(user: User = Depends(get_current_user)):
    return schemas.UserResponse.model_validate(user)

@app.post("/auth/logout", response_model=schemas.SuccessResponse)
async def logout(request: Request):
    logout_user(request)
    return schemas.SuccessResponse()

# ---------- Profile ----------

@app.get("/api/profile", response_model=schemas.ProfileEnvelope)
async def get_profile(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    logger.info(f"[ENDPOINT] GET /api/profile for {user.id}")
    try:
        profile = crud.get_student_profile_by_user_id(db, user.id)
    except Exception as e:
        logger.error(f"[ERROR] Failed to get profile: {str(e)}")
        return JSONResponse(status_code=500, content={"error": "Failed to get profile"})

    return schemas.ProfileEnvelope(
        profile=schemas.StudentProfileResponse.model_validate(profile) if profile else None
    )

@app.post("/api/profile", response_model=schemas.ProfileEnvelope)
async def update_profile(
    profile_data: schemas.StudentProfileUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Create or update the student profile (UPSERT).
    Only fields present in the request are written.
    """
    logger.info(f"[ENDPOINT] POST /api/profile for {user.id}")
    try:
        profile = crud.create_or_update_student_profile(
            db, user.id, profile_data.model_dump(exclude_unset=True)
        )
    except Exception as e:
        logger.error(f"[ERROR] Failed to update profile: {str(e)}")
        return JSONResponse(status_code=500, content={"error": "Failed to update profile"})

    return schemas.ProfileEnvelope(profile=schemas.StudentProfileResponse.model_validate(profile))

@app.get("/onboarding", response_model=schemas.OnboardingStatus)
async def onboarding_status(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Tells the frontend whether onboarding can be skipped."""
    complete = crud.is_student_profile_complete(db, user.id)
    return schemas.OnboardingStatus(profile_complete=complete, redirect="/" if complete else None)

# ---------- Saved programs ----------

@app.post("/api/programs/save", response_model=schemas.SuccessResponse)
async def save_program(
    request_body: schemas.SaveProgramRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    logger.info(f"[ENDPOINT] /api/programs/save for {user.id}")
    if request_body.program is None:
        return JSONResponse(status_code=400, content={"error": "Program data is missing in request"})

    program_details = request_body.program.model_dump(exclude={"match_score", "choice_type"})
    try:
        saved = crud.save_user_program(
            db,
            user.id,
            program_details,
            match_score=request_body.program.match_score,
            choice_type=request_body.program.choice_type
        )
    except Exception as e:
        logger.error(f"[ERROR] Error saving program: {str(e)}")
        return JSONResponse(status_code=500, content={"error": "Failed to save program"})

    return schemas.SuccessResponse(id=saved.id)

@app.delete("/api/programs/delete", response_model=schemas.SuccessResponse)
async def delete_program(
    id: Optional[str] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    logger.info(f"[ENDPOINT] /api/programs/delete id={id} for {user.id}")
    if not id:
        return JSONResponse(status_code=400, content={"error": "Program ID is required"})

    try:
        crud.delete_saved_program(db, id, user.id)
    except Exception as e:
        logger.error(f"[ERROR] Error deleting program: {str(e)}")
        return JSONResponse(status_code=500, content={"error": "Failed to delete program"})

    return schemas.SuccessResponse()

@app.get("/programs", response_model=schemas.ProgramListResponse)
async def list_programs(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    programs = crud.get_saved_programs_by_user_id(db, user.id)
    return schemas.ProgramListResponse(
        programs=[_saved_program_response(program) for program in programs],
        count=len(programs)
    )

@app.get("/programs/{program_id}", response_model=schemas.SavedProgramDetail)
async def program_detail(
    program_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    program = crud.get_saved_program_by_id(db, program_id, user.id)
    if not program:
        raise HTTPException(status_code=404, detail="Program not found")

    response = _saved_program_response(program)
    return schemas.SavedProgramDetail(
        **response.model_dump(),
        hero_image_url=next((url for url in response.image_urls if url), DEFAULT_HERO_IMAGE)
    )

@app.post("/programs/discuss", response_model=schemas.ChatResponse)
def discuss_programs(
    request_body: schemas.DiscussRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Ask the assistant about one saved program, or to compare two."""
    logger.info(f"[ENDPOINT] /programs/discuss ids={request_body.ids}")
    if not 1 <= len(request_body.ids) <= 2:
        raise HTTPException(status_code=400, detail="Select one or two programs to discuss")

    programs = []
    for program_id in request_body.ids:
        program = crud.get_saved_program_by_id(db, program_id, user.id)
        if not program:
            raise HTTPException(status_code=404, detail="Program not found")
        programs.append(program)

    message = build_discussion_prompt(programs)
    return process_chat(db, user, schemas.ChatRequest(message=message))

# ---------- Chat ----------

@app.post("/chat", response_model=schemas.ChatResponse)
def chat(
    chat_request: schemas.ChatRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Chat with the assistant.
    Tools run synchronously; their status events come back with the reply.
    """
    logger.info(f"[ENDPOINT] /chat called for {user.id}")
    return process_chat(db, user, chat_request)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
