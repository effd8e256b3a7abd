from __future__ import annotations

from typing import Any, Dict, Optional, Tuple
import logging
import threading

from .game_engine import GameEngine, GameState, new_session, to_client_view


logger = logging.getLogger(__name__)

GESTURES = ("tap", "long_press")


class InMemorySessions:
    """One game engine per player, held in process memory.

    Every call takes the registry lock, so gestures reach an engine one at a
    time even when the web server dispatches requests from a thread pool.
    """

    def __init__(self) -> None:
        self.engines: Dict[str, GameEngine] = {}
        self._lock = threading.Lock()

    def _engine(self, player_id: str) -> GameEngine:
        engine = self.engines.get(player_id)
        if engine is None:
            raise KeyError("session_not_found")
        return engine

    def start(
        self,
        player_id: str,
        num_rows: int,
        num_cols: int,
        num_mines: int,
        rng_seed: Optional[int] = None,
    ) -> GameState:
        engine = new_session(num_rows, num_cols, num_mines, rng_seed=rng_seed)
        with self._lock:
            replaced = player_id in self.engines
            self.engines[player_id] = engine
        logger.info(
            "session started player=%s board=%dx%d mines=%d replaced=%d",
            player_id, num_rows, num_cols, num_mines, int(replaced),
        )
        return engine.current_state()

    def get(self, player_id: str) -> Optional[GameState]:
        with self._lock:
            engine = self.engines.get(player_id)
            return engine.current_state() if engine else None

    def reveal(self, player_id: str, row: int, col: int) -> Tuple[GameState, Dict[str, Any]]:
        with self._lock:
            engine = self._engine(player_id)
            move = engine.reveal(row, col)
            return engine.current_state(), move

    def flag(self, player_id: str, row: int, col: int) -> Tuple[GameState, Dict[str, Any]]:
        with self._lock:
            engine = self._engine(player_id)
            move = engine.toggle_flag(row, col)
            return engine.current_state(), move

    def gesture(self, player_id: str, kind: str, row: int, col: int) -> Tuple[GameState, Dict[str, Any]]:
        if kind == "tap":
            return self.reveal(player_id, row, col)
        if kind == "long_press":
            return self.flag(player_id, row, col)
        raise ValueError("unknown_gesture")

    def end(self, player_id: str) -> None:
        with self._lock:
            if player_id not in self.engines:
                raise KeyError("session_not_found")
            del self.engines[player_id]
        logger.info("session ended player=%s", player_id)

    def to_client(self, state: GameState) -> Dict[str, Any]:
        return {
            "status": state.status.value,
            "board": to_client_view(state),
            "num_rows": state.num_rows,
            "num_cols": state.num_cols,
            "num_mines": state.num_mines,
            "flags_total": state.flags_total,
            "revealed_total": state.revealed_total,
            "mines_remaining": state.mines_remaining,
        }
