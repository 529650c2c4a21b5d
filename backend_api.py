from __future__ import annotations

import hmac
import logging
import os
from pathlib import Path
from typing import Any

from flask import Flask, jsonify, request

from builders.season_builder import build_scope_standings, build_season_entries, list_seasons
from contracts.championship import CHAMPIONSHIPS, SUPER_LEAGUE_ID, championship_id, get_championship
from filters.match_filters import ALL, is_super_league, matchday_games
from metrics.stats_engine import compute_all_stats
from store.errors import SnapshotValidationError
from store.league_store import LeagueStore
from store.snapshot_io import read_snapshot_file, validate_snapshot_payload, write_snapshot_file
from trophies.champions import derive_champions, derive_pantheon, persist_pantheon
from trophies.completion import season_progress

logger = logging.getLogger(__name__)

ADMIN_HEADER = "X-Admin-Token"


def _safe_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _safe_opt_int(value: Any) -> int | None:
    try:
        if value is None:
            return None
        return int(value)
    except (TypeError, ValueError):
        return None


def _load_store(data_path: Path | None) -> LeagueStore:
    if data_path is None or not data_path.is_file():
        if data_path is not None:
            logger.info("No snapshot at %s, starting empty", data_path)
        return LeagueStore()
    return LeagueStore.from_dict(read_snapshot_file(data_path))


def create_app(
    store: LeagueStore | None = None,
    admin_token: str | None = None,
    data_path: str | Path | None = None,
) -> Flask:
    app = Flask(__name__)

    cors_origin = os.environ.get("CORS_ORIGIN", "*")
    if data_path is None and os.environ.get("HYENES_DATA_PATH"):
        data_path = os.environ["HYENES_DATA_PATH"]
    data_path = Path(data_path) if data_path else None
    if admin_token is None:
        admin_token = os.environ.get("HYENES_ADMIN_TOKEN", "")
    if store is None:
        store = _load_store(data_path)

    def _is_admin() -> bool:
        supplied = request.headers.get(ADMIN_HEADER, "")
        return bool(admin_token) and hmac.compare_digest(supplied.encode(), admin_token.encode())

    def _persist() -> None:
        if data_path is None:
            return
        try:
            write_snapshot_file(store.to_export_dict(), data_path)
        except OSError as exc:
            logger.warning("Could not write snapshot to %s: %s", data_path, exc)

    def _forbidden():
        return jsonify({"error": "Admin token required"}), 403

    def _latest_season() -> int | None:
        seasons = list_seasons(store.snapshot())
        return seasons[-1] if seasons else None

    @app.after_request
    def add_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = cors_origin
        response.headers["Access-Control-Allow-Headers"] = f"Content-Type,{ADMIN_HEADER}"
        response.headers["Access-Control-Allow-Methods"] = "GET,POST,PATCH,DELETE,OPTIONS"
        return response

    @app.errorhandler(SnapshotValidationError)
    def handle_invalid_snapshot(exc: SnapshotValidationError):
        return jsonify({"error": str(exc), "errors": exc.errors}), 400

    @app.errorhandler(ValueError)
    def handle_value_error(exc: ValueError):
        return jsonify({"error": str(exc)}), 400

    @app.errorhandler(KeyError)
    def handle_key_error(exc: KeyError):
        message = exc.args[0] if exc.args else "Not found"
        return jsonify({"error": str(message)}), 404

    @app.route("/api/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok"})

    @app.route("/api/championships", methods=["GET"])
    def get_championships():
        return jsonify(
            {
                "championships": [c.to_dict() for c in CHAMPIONSHIPS],
                "seasons": list_seasons(store.snapshot()),
            }
        )

    @app.route("/api/managers", methods=["GET"])
    def get_managers():
        return jsonify({"managers": [m.to_dict() for m in store.managers()]})

    @app.route("/api/standings", methods=["GET"])
    def get_standings():
        championship = request.args.get("championship", SUPER_LEAGUE_ID)
        config = get_championship(championship)
        if config is None:
            return jsonify({"error": f"Unknown championship {championship}"}), 404
        season = _safe_opt_int(request.args.get("season"))
        if season is None:
            season = _latest_season()
        if season is None:
            return jsonify({"error": "No season recorded yet"}), 404

        entry = build_scope_standings(store.snapshot(), config.key, season, store.penalties())
        if entry is None:
            return jsonify({"error": f"No standings for {config.id} season {season}"}), 404

        progress = season_progress(config.key, season, entry.played_matchdays, entry.standings)
        return jsonify(
            {
                "championship": config.id,
                "season": season,
                "standings": [row.to_dict() for row in entry.standings],
                "playedMatchdays": entry.played_matchdays,
                "exemptTeam": entry.exempt_team,
                "progress": progress.to_dict(),
            }
        )

    @app.route("/api/matches", methods=["GET"])
    def get_matches():
        championship = request.args.get("championship", "france")
        if get_championship(championship) is None or is_super_league(championship):
            return jsonify({"error": "A domestic championship is required"}), 400
        season = _safe_int(request.args.get("season"), -1)
        matchday = _safe_int(request.args.get("matchday"), 1)
        games = matchday_games(store.snapshot().matches, championship, season, matchday)
        return jsonify(
            {
                "championship": championship_id(championship),
                "season": season,
                "matchday": matchday,
                "games": [g.to_dict() for g in games],
            }
        )

    @app.route("/api/matches", methods=["POST"])
    def post_matches():
        if not _is_admin():
            return _forbidden()
        payload = request.get_json(silent=True) or {}
        block = store.record_matchday(
            championship=payload.get("championship", ""),
            season=payload.get("season"),
            matchday=payload.get("matchday"),
            games=payload.get("games") or [],
            exempt=payload.get("exempt", ""),
        )
        _persist()
        return jsonify({"block": block.to_dict()}), 201

    @app.route("/api/champions", methods=["GET"])
    def get_champions():
        championship = request.args.get("championship", SUPER_LEAGUE_ID)
        if get_championship(championship) is None:
            return jsonify({"error": f"Unknown championship {championship}"}), 404
        penalties = store.penalties()
        seasons = build_season_entries(store.snapshot(), penalties)
        champions = derive_champions(seasons, championship, penalties)
        return jsonify(
            {
                "championship": championship_id(championship),
                "champions": [c.to_dict() for c in champions],
            }
        )

    @app.route("/api/pantheon", methods=["GET"])
    def get_pantheon():
        snapshot = store.snapshot()
        penalties = store.penalties()
        result = derive_pantheon(build_season_entries(snapshot, penalties), snapshot.team_names, penalties)
        if persist_pantheon(result, store, authorized=_is_admin()):
            _persist()
        return jsonify(result.to_dict())

    @app.route("/api/stats", methods=["GET"])
    def get_stats():
        championship = request.args.get("championship", ALL)
        season = request.args.get("season", ALL)
        result = compute_all_stats(store.snapshot(), championship, season, store.penalties())
        return jsonify({"stats": result.to_dict() if result is not None else None})

    @app.route("/api/export", methods=["GET"])
    def get_export():
        return jsonify(store.to_export_dict())

    @app.route("/api/import", methods=["POST"])
    def post_import():
        if not _is_admin():
            return _forbidden()
        payload = request.get_json(silent=True)
        errors = validate_snapshot_payload(payload, request.content_length or 0)
        if errors:
            raise SnapshotValidationError(errors)
        store.load(payload)
        _persist()
        return jsonify({"managers": len(store.managers()), "seasons": list_seasons(store.snapshot())})

    @app.route("/api/penalties", methods=["GET"])
    def get_penalties():
        championship = request.args.get("championship")
        season = _safe_opt_int(request.args.get("season"))
        if championship and season is not None:
            return jsonify({"penalties": store.scope_penalties(championship, season)})
        return jsonify({"penalties": store.penalties()})

    @app.route("/api/penalties", methods=["POST", "DELETE"])
    def change_penalty():
        if not _is_admin():
            return _forbidden()
        payload = request.get_json(silent=True) or {}
        championship = payload.get("championship", "")
        season = _safe_int(payload.get("season"), -1)
        team = payload.get("team", "")
        if season < 1:
            return jsonify({"error": "season is required"}), 400

        if request.method == "DELETE":
            removed = store.remove_penalty(championship, season, team)
            if not removed:
                return jsonify({"error": f"No penalty for {team}"}), 404
            _persist()
            return jsonify({"removed": True})

        points = store.set_penalty(championship, season, team, payload.get("points"))
        _persist()
        return jsonify({"championship": championship_id(championship), "season": season,
                        "team": team, "points": points})

    @app.route("/api/managers", methods=["POST"])
    def post_manager():
        if not _is_admin():
            return _forbidden()
        payload = request.get_json(silent=True) or {}
        manager = store.add_manager(payload.get("name"))
        _persist()
        return jsonify(manager.to_dict()), 201

    @app.route("/api/managers/<manager_id>", methods=["PATCH"])
    def patch_manager(manager_id: str):
        if not _is_admin():
            return _forbidden()
        payload = request.get_json(silent=True) or {}
        manager = store.rename_manager(manager_id, payload.get("name"))
        _persist()
        return jsonify(manager.to_dict())

    @app.route("/api/seasons", methods=["POST"])
    def post_season():
        if not _is_admin():
            return _forbidden()
        payload = request.get_json(silent=True) or {}
        keys = store.create_season(payload.get("season"))
        _persist()
        return jsonify({"created": keys}), 201

    @app.route("/api/seasons/exempt", methods=["POST"])
    def post_exempt_team():
        if not _is_admin():
            return _forbidden()
        payload = request.get_json(silent=True) or {}
        championship = payload.get("championship", "")
        season = payload.get("season")
        team = store.set_exempt_team(championship, season, payload.get("team", ""))
        _persist()
        return jsonify({"championship": championship_id(championship), "season": int(season),
                        "exemptTeam": team})

    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    port = int(os.environ.get("PORT", 5000))
    create_app().run(host="0.0.0.0", port=port, debug=True)
