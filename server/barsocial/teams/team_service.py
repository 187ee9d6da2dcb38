"""Team lookup service client"""
import os
import httpx
from typing import Optional, List, Dict, Any
import logging

logger = logging.getLogger(__name__)


class TeamService:
    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url if base_url is not None else os.getenv("TEAMS_API_URL", "")
        self.timeout = timeout if timeout is not None else float(os.getenv("TEAMS_API_TIMEOUT", "5"))
        self.transport = transport

        if self.base_url:
            logger.info(f"Team service configured: {self.base_url}")
        else:
            logger.warning("TEAMS_API_URL not set, favorite teams will be returned as id references")

    @staticmethod
    def team_reference(team_id: str) -> Dict[str, Any]:
        return {"id": team_id}

    async def populate_teams(self, team_ids: List[str]) -> List[Dict[str, Any]]:
        """
        Resolve team ids into team objects

        Teams the service does not know (404) are dropped. If the service is not
        configured or fails, bare id references are returned instead so a
        profile can still be displayed.
        """
        if not team_ids:
            return []
        if not self.base_url:
            return [self.team_reference(team_id) for team_id in team_ids]

        teams = []
        try:
            async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout,
                                         transport=self.transport) as client:
                for team_id in team_ids:
                    response = await client.get(f"/teams/{team_id}")
                    if response.status_code == 404:
                        logger.warning(f"Team not found in team service: {team_id}")
                        continue
                    response.raise_for_status()
                    teams.append(response.json())
        except (httpx.HTTPError, ValueError) as e:
            # ValueError covers a 200 whose body is not JSON
            logger.warning(f"Team service lookup failed, returning id references: {e}")
            return [self.team_reference(team_id) for team_id in team_ids]

        return teams

# Global instance
_team_service: Optional[TeamService] = None

def get_team_service() -> TeamService:
    """Get or create team service instance"""
    global _team_service
    if _team_service is None:
        _team_service = TeamService()
    return _team_service
