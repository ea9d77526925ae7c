import numpy as np

class SolutionSnapshot(object):
    """
    Buffers holding the values of the decision variables at the current point of the search.
    -------------------
    Params:
        instance:           optimisation.instance.Instance
                                instance the variables belong to.

    x[k] is an array of shape (number of sections of demand k, number of nodes) and y an array of shape
    (number of nodes, number of vnfs). A snapshot is allocated per callback invocation.
    """
    def __init__(self, instance):
        self.instance = instance
        self.x = [np.zeros((instance.nb_sections(k), instance.nb_nodes)) for k in range(instance.nb_demands)]
        self.y = np.zeros((instance.nb_nodes, instance.nb_vnfs))

    def load(self, values):
        """
        stores the values, given in the order of instance.get_variable_keys().
        """
        for key, value in zip(self.instance.get_variable_keys(), values):
            if key[0] == "x":
                self.x[key[1]][key[2], key[3]] = value
            else:
                self.y[key[1], key[2]] = value

    @classmethod
    def from_relaxation(cls, instance, context):
        """
        returns a snapshot of the fractional point of a relaxation event.
        """
        snapshot = cls(instance)
        snapshot.load(context.get_relaxation_values(instance.get_variable_keys()))
        return snapshot

    @classmethod
    def from_candidate(cls, instance, context):
        """
        returns a snapshot of the integer point of a candidate event.
        """
        snapshot = cls(instance)
        snapshot.load(context.get_candidate_values(instance.get_variable_keys()))
        return snapshot

    def value(self, key) -> float:
        if key[0] == "x":
            return self.x[key[1]][key[2], key[3]]
        return self.y[key[1], key[2]]
