"""Abstract base class for BrandLink storage implementations."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from .models import Link, LinkAnalytics, Team, TeamMember, TeamRole


class BrandLinkDBBase(ABC):
    """Abstract base class for team, link and analytics storage."""
    
    def __init__(self, db_config: str):
        """Initialize database connection.
        
        Args:
            db_config: Database connection string
        """
        self.db_config = db_config
    
    # Teams
    
    @abstractmethod
    async def get_team(self, team_id: str) -> Optional[Team]:
        """Get a team by primary key."""
        pass
    
    @abstractmethod
    async def get_team_by_slug(self, slug: str) -> Optional[Team]:
        """Get the team whose persisted slug equals ``slug``.
        
        Args:
            slug: Lowercased slug to match exactly
            
        Returns:
            The team if found, None otherwise
        """
        pass
    
    @abstractmethod
    async def list_unslugged_teams(self) -> List[Team]:
        """List teams without a persisted slug, oldest first."""
        pass
    
    @abstractmethod
    async def slug_taken(self, slug: str) -> bool:
        """Check whether a team already holds ``slug``.
        
        Args:
            slug: Candidate slug
            
        Returns:
            True if taken
        """
        pass
    
    @abstractmethod
    async def create_team(
        self,
        team: Team,
        owner_customer_id: str,
        owner_role: TeamRole = TeamRole.OWNER,
    ) -> Team:
        """Insert a team and its owning membership in one transaction.
        
        Raises:
            ConflictError: If the slug is already taken
        """
        pass
    
    @abstractmethod
    async def get_membership(self, team_id: str, customer_id: str) -> Optional[TeamMember]:
        """Get the membership of ``customer_id`` in ``team_id``."""
        pass
    
    # Links
    
    @abstractmethod
    async def get_link(self, link_id: str) -> Optional[Link]:
        """Get a link by its globally unique primary key."""
        pass
    
    @abstractmethod
    async def get_link_by_short_id(self, team_id: str, short_id: int) -> Optional[Link]:
        """Get a link by its (team_id, short_id) composite key."""
        pass
    
    @abstractmethod
    async def list_team_links(self, team_id: str) -> List[Link]:
        """List all links of a team, newest first."""
        pass
    
    @abstractmethod
    async def backfill_short_ids(self, team_id: str) -> List[Link]:
        """Assign short ids to every link of the team that lacks one.
        
        Assignment continues from the team's current maximum short id and
        happens in a single transaction that serializes with any other
        backfill or link creation for the same team. Either every missing
        short id is assigned or none is.
        
        Args:
            team_id: Team whose links to backfill
            
        Returns:
            The team's links after backfill, newest first
        """
        pass
    
    @abstractmethod
    async def create_link(self, link: Link, max_links: Optional[int] = None) -> Link:
        """Insert a link, assigning the next short id for its team.
        
        The link count check, short id assignment and insert happen in
        the same team-serialized transaction as backfill.
        
        Args:
            link: Link to insert (``short_id`` None means next free)
            max_links: Plan limit on the team's links, None for unlimited
        
        Raises:
            LinkLimitError: If the team already holds ``max_links`` links
            ConflictError: If the (team_id, short_id) pair or id is taken
        """
        pass
    
    @abstractmethod
    async def update_link(self, link_id: str, changes: Dict[str, Any]) -> Optional[Link]:
        """Update ``target_url`` and/or ``title`` of a link.
        
        Args:
            link_id: Link primary key
            changes: Column values keyed by field name
            
        Returns:
            The updated link, or None if not found
        """
        pass
    
    @abstractmethod
    async def delete_link(self, link_id: str) -> bool:
        """Delete a link and its analytics events.
        
        Returns:
            True if deleted, False if not found
        """
        pass
    
    # Analytics
    
    @abstractmethod
    async def insert_analytics(self, event: LinkAnalytics) -> None:
        """Append a click event."""
        pass
    
    @abstractmethod
    async def list_team_analytics(self, team_id: str, since: datetime) -> List[LinkAnalytics]:
        """List a team's click events created at or after ``since``."""
        pass
    
    @abstractmethod
    async def close(self) -> None:
        """Close database connections."""
        pass
    
    @abstractmethod
    async def health_check(self) -> bool:
        """Check if database is healthy.
        
        Returns:
            True if healthy, False otherwise
        """
        pass
