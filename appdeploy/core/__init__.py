from .deployer import Deployer

__all__ = ["Deployer"]
