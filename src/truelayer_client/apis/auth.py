"""Auth API: access to the client's current access token."""

from ..auth.manager import TokenManager
from ..models.auth import AccessToken


class AuthApi:
    """Expose the token used by the other APIs.

    Useful to hand a token to components that call TrueLayer directly,
    such as a front end embedding the hosted payment page.

    :param token_manager: Token manager shared with the pipeline
    :type token_manager: TokenManager
    """

    def __init__(self, token_manager: TokenManager):
        self._token_manager = token_manager

    async def get_access_token(self) -> AccessToken:
        """Return a valid access token, refreshing it if necessary.

        :return: Current access token, with its refresh token if one was issued
        :rtype: AccessToken
        :raises AuthError: If no token could be obtained
        """
        return await self._token_manager.get_token()
