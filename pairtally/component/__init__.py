'''Interchangeable components of the evaluators.'''
