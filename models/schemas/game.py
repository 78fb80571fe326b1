from marshmallow import Schema, fields, validate, pre_load, EXCLUDE


class GameCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    game_name = fields.String(data_key="gameName", required=True, validate=validate.Length(min=1, max=128))
    game_description = fields.String(data_key="gameDescription", required=True, validate=validate.Length(min=1))
    no_of_players_required = fields.Integer(
        data_key="noOfPlayersRequired", load_default=1, validate=validate.Range(min=1)
    )

    @pre_load
    def trim(self, data, **kwargs):
        if isinstance(data, dict):
            data = dict(data)
            for key in ("gameName", "gameDescription"):
                if isinstance(data.get(key), str):
                    data[key] = data[key].strip()
        return data


class GameOutSchema(Schema):
    id = fields.String()
    game_name = fields.String(data_key="gameName")
    game_description = fields.String(data_key="gameDescription")
    no_of_players_required = fields.Integer(data_key="noOfPlayersRequired")
    created_at = fields.DateTime(allow_none=True)
