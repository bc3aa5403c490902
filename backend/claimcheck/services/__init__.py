# Verification Pipeline Services
#
# ClaimExtractor → QueryBuilder → EvidenceFetcher → VerdictSynthesizer
# orchestrated by VerificationPipeline (pipeline.py). The oracle and the
# Wikidata client are injected into each stage.
