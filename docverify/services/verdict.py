from __future__ import annotations

from docverify.schemas.document import OffChainFacet, OnChainFacet, Verdict


def classify_verdict(on_chain: OnChainFacet | None, off_chain: OffChainFacet | None) -> Verdict:
    """Reconcile the two registration facets of a digest into a verdict.

    Only facet presence matters; the content of either facet is never inspected.
    An off-chain record without an on-chain one is still NOT_FOUND.
    """
    if on_chain is None:
        return Verdict.NOT_FOUND
    if off_chain is None:
        return Verdict.VERIFIED_ON_CHAIN_ONLY
    return Verdict.VERIFIED_OK
