from abc import ABC, abstractmethod
from typing import Dict, Any


class BaseAgent(ABC):
    """
    Base interface for the brief desk's agents.

    Agents hold configuration and collaborators, never per-brief state:
    everything about the brief being edited arrives in the input.
    """

    name: str

    @abstractmethod
    def run(self, input: Dict[str, Any]) -> Dict[str, Any]:
        """
        Execute the agent.

        Args:
            input: Structured input dictionary defined by the agent schema.

        Returns:
            Structured output dictionary defined by the agent schema.
        """
        raise NotImplementedError
