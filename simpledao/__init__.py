"""
SimpleDao Package

A token-custody governance engine with a pausable governance token.
Core imports are lazily loaded; for direct module access import from
submodules:

    from simpledao.governance import SimpleDao, ProposalResult
    from simpledao.tokens import GovernanceToken
"""

__version__ = "1.0.0"


def __getattr__(name):
    """Lazy module loading to keep `import simpledao` cheap."""
    if name == 'SimpleDao':
        from .governance.dao import SimpleDao
        return SimpleDao
    elif name == 'GovernanceToken':
        from .tokens.governance_token import GovernanceToken
        return GovernanceToken
    elif name == 'ProposalResult':
        from .governance.proposals import ProposalResult
        return ProposalResult
    raise AttributeError(f"module 'simpledao' has no attribute {name!r}")

__all__ = ['SimpleDao', 'GovernanceToken', 'ProposalResult']
