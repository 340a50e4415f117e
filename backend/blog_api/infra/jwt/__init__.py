from .flask_jwt_token_issuer import FlaskJWTTokenIssuer

__all__ = ["FlaskJWTTokenIssuer"]
