import logging
from typing import Literal, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from app.config import Settings, load_settings
from minesweeper.sessions import InMemorySessions

API_BASE = "/api/minesweeper"


class StartBody(BaseModel):
    model_config = ConfigDict(extra="forbid")

    num_rows: Optional[int] = None
    num_cols: Optional[int] = None
    num_mines: Optional[int] = None


class MoveBody(BaseModel):
    row: int = Field(..., ge=0)
    col: int = Field(..., ge=0)


class GestureBody(MoveBody):
    kind: Literal["tap", "long_press"]


def _last_move(move: dict) -> dict:
    return {
        "row": move["row"],
        "col": move["col"],
        "hit_mine": bool(move["hit_mine"]),
        "changed": bool(move["changed"]),
    }


def configure_logging(level: str) -> None:
    # Uvicorn only configures its own loggers; reuse its handlers for the library.
    lib_logger = logging.getLogger("minesweeper")
    lib_logger.setLevel(level)
    if not lib_logger.handlers:
        handlers = logging.getLogger("uvicorn.error").handlers or [logging.StreamHandler()]
        for handler in handlers:
            lib_logger.addHandler(handler)
        lib_logger.propagate = False


def create_app(sessions=None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Minesweeper Engine", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"]
    )

    app.state.sessions = sessions or InMemorySessions()
    app.state.settings = settings

    @app.on_event("startup")
    async def _log_settings():
        logging.getLogger("uvicorn.error").info(
            f"[minesweeper] Sessions={app.state.sessions.__class__.__name__} "
            f"default_board={settings.default_rows}x{settings.default_cols}x{settings.default_mines} "
            f"MAX_DIMENSION={settings.max_dimension} ALLOW_ANON={int(settings.allow_anon)}"
        )

    def get_user_id(req: Request) -> str:
        logger = logging.getLogger("uvicorn.error")
        uid = req.headers.get("X-User-Id")
        if uid:
            return uid
        if settings.allow_anon:
            logger.debug(f"[minesweeper] get_user_id via=anon-fallback user_id={settings.default_user_id}")
            return settings.default_user_id
        logger.warning("[minesweeper] get_user_id missing user id allow_anon=0")
        raise HTTPException(status_code=401, detail="missing user id")

    def _respond(state, user_id: str, move: Optional[dict] = None) -> dict:
        resp = app.state.sessions.to_client(state) | {"game_id": user_id}
        if move is not None:
            resp["last_move"] = _last_move(move)
        return resp

    @app.post(f"{API_BASE}/start")
    def start_game(body: StartBody, user_id: str = Depends(get_user_id)):
        num_rows = settings.default_rows if body.num_rows is None else body.num_rows
        num_cols = settings.default_cols if body.num_cols is None else body.num_cols
        num_mines = settings.default_mines if body.num_mines is None else body.num_mines
        if num_rows > settings.max_dimension or num_cols > settings.max_dimension:
            raise HTTPException(status_code=400, detail="board_too_large")
        try:
            state = app.state.sessions.start(user_id, num_rows, num_cols, num_mines)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _respond(state, user_id)

    @app.get(f"{API_BASE}/state")
    def get_state(user_id: str = Depends(get_user_id)):
        state = app.state.sessions.get(user_id)
        if state is None:
            raise HTTPException(status_code=404, detail="no game")
        return _respond(state, user_id)

    @app.post(f"{API_BASE}/reveal")
    def reveal(body: MoveBody, user_id: str = Depends(get_user_id)):
        try:
            state, move = app.state.sessions.reveal(user_id, body.row, body.col)
        except KeyError:
            raise HTTPException(status_code=404, detail="no game")
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _respond(state, user_id, move)

    @app.post(f"{API_BASE}/flag")
    def flag(body: MoveBody, user_id: str = Depends(get_user_id)):
        try:
            state, move = app.state.sessions.flag(user_id, body.row, body.col)
        except KeyError:
            raise HTTPException(status_code=404, detail="no game")
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _respond(state, user_id, move)

    @app.post(f"{API_BASE}/gesture")
    def gesture(body: GestureBody, user_id: str = Depends(get_user_id)):
        try:
            state, move = app.state.sessions.gesture(user_id, body.kind, body.row, body.col)
        except KeyError:
            raise HTTPException(status_code=404, detail="no game")
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _respond(state, user_id, move)

    @app.post(f"{API_BASE}/end")
    def end_game(user_id: str = Depends(get_user_id)):
        try:
            app.state.sessions.end(user_id)
        except KeyError:
            raise HTTPException(status_code=404, detail="no game")
        return {"game_id": user_id, "ended": True}

    return app


app = create_app()
