'''Loading and saving election data.

Currently one format is supported: JSON election files
(:mod:`pairtally.io.jsonfile`) holding the candidates and the ballots of
a single election.
'''
