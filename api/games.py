from __future__ import annotations

from typing import Tuple

from flask import Blueprint, request, abort
from sqlalchemy import func

from api.responses import api_response
from models import storage
from models.game import Game
from models.schemas.game import GameCreateSchema, GameOutSchema
from utils.decorators import jwt_required
from utils.exceptions import Conflict

bp = Blueprint("games", __name__)

create_schema = GameCreateSchema()
out_list_schema = GameOutSchema(many=True)
out_schema = GameOutSchema()

MAX_LIMIT = 100


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", "20"))
        page = max(page, 1)
        limit = max(1, min(limit, MAX_LIMIT))
        return page, limit
    except ValueError:
        abort(400, description="page and limit must be integers")


def exists_name_case_insensitive(session, name: str) -> bool:
    q = session.query(Game).filter(func.lower(Game.game_name) == name.lower())
    return session.query(q.exists()).scalar()


@bp.get("/games")
def list_games():
    """
    List games (pagination)
    ---
    tags: [Games]
    parameters:
      - in: query
        name: page
        type: integer
        default: 1
      - in: query
        name: limit
        type: integer
        default: 20
    responses:
      200: { description: OK }
    """
    session = storage.get_session()
    page, limit = parse_pagination()
    query = session.query(Game)
    total = query.count()
    rows = query.order_by(Game.game_name.asc()).offset((page - 1) * limit).limit(limit).all()
    return api_response(
        200,
        {"games": out_list_schema.dump(rows), "meta": {"page": page, "limit": limit, "total": total}},
        "Games fetched successfully",
    )


@bp.post("/games")
@jwt_required()
def create_game():
    """
    Create a game
    ---
    tags: [Games]
    security:
      - Bearer: []
    consumes: [application/json]
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            gameName: { type: string, maxLength: 128 }
            gameDescription: { type: string }
            noOfPlayersRequired: { type: integer, minimum: 1 }
    responses:
      201: { description: Created }
      400: { description: Validation error }
      401: { description: Unauthorized }
      409: { description: Name already exists }
    """
    session = storage.get_session()
    data = create_schema.load(request.get_json(silent=True) or {})
    if exists_name_case_insensitive(session, data["game_name"]):
        raise Conflict("Game name already exists")
    game = Game(**data)
    storage.new(game)
    storage.save()
    return api_response(201, out_schema.dump(game), "Game created successfully")
