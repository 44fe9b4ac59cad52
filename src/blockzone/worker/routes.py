from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request

from .daily import iso
from .errors import ValidationError
from .sessions import access_payload, daily_seed, parse_score

api_bp = Blueprint("api", __name__, url_prefix="/api")


def _services():
    return current_app.extensions["blockzone"]


def _body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON body")
    return data


# ----------------------------------------------------------------------
# Game sessions
# ----------------------------------------------------------------------
@api_bp.route("/game/start", methods=["POST"])
def game_start():
    data = _body()
    session = _services().sessions.start(data.get("playerId"), data.get("gameType"))
    message = "Game started with unlimited pass" if session["creditUsed"] == "unlimited_pass" else "Free game started"
    return jsonify({"success": True, "sessionId": session["sessionId"], "gameSession": session, "message": message})


@api_bp.route("/game/complete", methods=["POST"])
def game_complete():
    data = _body()
    result = _services().sessions.complete(
        data.get("sessionId"),
        data.get("score"),
        lines=data.get("lines") or 0,
        time=data.get("time") or 0,
        player_name=data.get("playerName"),
    )
    return jsonify(result)


@api_bp.route("/game-over", methods=["POST"])
def game_over():
    data = _body()
    return jsonify(_services().sessions.game_over(data.get("playerId"), data.get("score"), data.get("gameData")))


@api_bp.route("/daily-seed", methods=["POST"])
def seed_for_day():
    data = _body()
    date, game = data.get("date"), data.get("game")
    if not date or not game:
        raise ValidationError("Missing date or game parameter")
    return jsonify({"seed": daily_seed(game, date, _services().config.seed_salt), "date": date, "game": game})


# ----------------------------------------------------------------------
# Scores and leaderboards
# ----------------------------------------------------------------------
@api_bp.route("/scores", methods=["POST"])
def submit_score():
    data = _body()
    if not data.get("player_id"):
        raise ValidationError("Missing required fields: player_id, score")
    result = _services().leaderboard.submit(
        data["player_id"],
        parse_score(data.get("score")),
        display_name=data.get("player_name"),
        game_type=data.get("game_type"),
        seed=data.get("seed"),
        timestamp=data.get("timestamp"),
    )
    return jsonify({"success": True, "score_id": result.score_id, "rank": result.rank, "total_scores": result.total})


@api_bp.route("/leaderboard", methods=["GET"])
def leaderboard():
    services = _services()
    game_type = request.args.get("game_type") or services.config.default_game_type
    period = request.args.get("period") or "daily"
    board = services.leaderboard.load(game_type, period)
    body: Dict[str, Any] = {
        "game_type": game_type,
        "period": period,
        "scores": services.leaderboard.ranked(game_type, period),
        "last_updated": board.get("last_updated"),
    }
    if not body["scores"]:
        body["message"] = "No scores found for this period"
    return jsonify(body)


@api_bp.route("/leaderboard/daily", methods=["GET"])
def leaderboard_daily():
    services = _services()
    game_type = request.args.get("game_type") or services.config.default_game_type
    board = services.leaderboard.load(game_type)
    return jsonify({
        "success": True,
        "leaderboard": services.leaderboard.summary(board, services.config.daily_view_size),
        "totalPlayers": len(board["scores"]),
        "lastUpdated": board.get("last_updated"),
        "date": services.leaderboard.today(),
    })


@api_bp.route("/leaderboard/top/<limit>", methods=["GET"])
def leaderboard_top(limit: str):
    services = _services()
    try:
        n = int(limit)
    except ValueError:
        n = 0
    if n <= 0:
        n = services.config.top_count
    game_type = request.args.get("game_type") or services.config.default_game_type
    return jsonify(services.leaderboard.top(game_type, n))


@api_bp.route("/leaderboard/rank/<player_id>", methods=["GET"])
def leaderboard_rank(player_id: str):
    services = _services()
    game_type = request.args.get("game_type") or services.config.default_game_type
    return jsonify(services.leaderboard.rank_of(player_id, game_type))


# ----------------------------------------------------------------------
# Players and access
# ----------------------------------------------------------------------
def _status_body(player_id: str) -> Dict[str, Any]:
    access = _services().players.access_status(player_id)
    return {
        "player_id": player_id,
        "current_day": access.day,
        "has_unlimited_pass": access.has_unlimited_pass,
        "has_used_free_game": access.has_used_free_game,
        "can_play_free": access.can_play_free,
        "requires_payment": access.requires_payment,
        "next_reset": iso(access.next_reset),
        "status": "unlimited" if access.has_unlimited_pass else access.reason,
        "access": access_payload(access),
    }


@api_bp.route("/players/status", methods=["GET"])
def player_status():
    player_id = request.args.get("player_id")
    if not player_id:
        raise ValidationError("Missing player_id parameter")
    return jsonify(_status_body(player_id))


@api_bp.route("/players/register", methods=["POST"])
def player_profile_register():
    data = _body()
    profile = _services().players.register_profile(
        data.get("playerId"),
        data.get("gameName"),
        data.get("displayName"),
        wallet_address=data.get("walletAddress"),
        is_account_abstraction=data.get("isAccountAbstraction", False),
    )
    return jsonify({
        "success": True,
        "player_id": profile["player_id"],
        "display_name": profile["display_name"],
        "message": "Player registered successfully",
    })


@api_bp.route("/players/profile", methods=["GET"])
def player_profile():
    player_id = request.args.get("player_id")
    profile = _services().players.profile(player_id)
    profile["status"] = _status_body(player_id)
    return jsonify({"success": True, "profile": profile})


@api_bp.route("/player/create", methods=["POST"])
def player_create():
    data = _body()
    player = _services().players.create(
        data.get("device_fingerprint"),
        data.get("wallet_address"),
        display_name=data.get("displayName"),
        quark_balance=data.get("quark_balance"),
    )
    return jsonify({"success": True, "player": player, "message": "Player created successfully"})


@api_bp.route("/player/register", methods=["POST"])
def player_register():
    data = _body()
    player, created = _services().players.register(data.get("deviceId"), data.get("name"))
    message = f"Welcome {player['displayName']}!" if created else "Player already registered"
    return jsonify({"success": True, "player": player, "message": message})


@api_bp.route("/player/update-stats", methods=["POST"])
def player_update_stats():
    data = _body()
    fingerprint = data.pop("device_fingerprint", None)
    player = _services().players.update_stats(fingerprint, data)
    return jsonify({"success": True, "player": player, "message": "Stats updated successfully"})


@api_bp.route("/player/fingerprint/<fingerprint>", methods=["GET"])
def player_by_fingerprint(fingerprint: str):
    return jsonify(_services().players.by_fingerprint(fingerprint))


@api_bp.route("/player/use-free-game", methods=["POST"])
def player_use_free_game():
    data = _body()
    day = _services().players.use_free_game(data.get("player_id"))
    return jsonify({"success": True, "player_id": data.get("player_id"), "day": day})


@api_bp.route("/player/grant-unlimited-pass", methods=["POST"])
def player_grant_unlimited_pass():
    data = _body()
    expiry = _services().players.grant_unlimited_pass(data.get("player_id"))
    return jsonify({"success": True, "player_id": data.get("player_id"), "expiry": iso(expiry)})


@api_bp.route("/payment/process", methods=["POST"])
def payment_process():
    data = _body()
    expiry = _services().players.process_payment(
        data.get("playerId"), data.get("paymentType"), data.get("transactionId"), data.get("amount")
    )
    return jsonify({
        "success": True,
        "paymentType": "unlimited_pass",
        "expiry": iso(expiry),
        "message": "Unlimited pass granted until the daily reset!",
    })


@api_bp.route("/health", methods=["GET"])
def health():
    services = _services()
    return jsonify({
        "status": "ok",
        "service": services.config.service_name,
        "version": services.config.version,
        "timestamp": iso(services.clock()),
    })
