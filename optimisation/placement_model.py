from time import time
from optimisation.instance import Instance
from optimisation.parameters import Parameters
from optimisation.availability import (parallel_availability, chain_availability, meets_requirement, min_nb_nodes_ranked, availability_lines,
                                       unavailability_lines)
from math import log
from optimisation.callback import CallbackDispatcher, CallbackError
from optimisation.cuts import EPS
from optimisation.gurobi_context import GurobiContext
import gurobipy as gp
from gurobipy import GRB
import logging
import json

env = gp.Env(empty=True)
env.setParam("OutputFlag",0)
env.start()

class PlacementModel(object):
    """
    Description:    Class representing the VNF placement problem solved by branch-and-cut.
    Parameters:     instance - Instance of the Instance class to be optimised.
                    parameters - Parameters of the run.
                    verbose - int verbosity of output.
                    log_dir - string directory of the log file.
                    logfile - string filename to use to log output.
    """
    def __init__(self, instance: Instance, parameters: Parameters = None, verbose: int = 1, log_dir: str = "", logfile: str = 'log.txt') -> None:
        """
        Initialises the optimisation problem
        """
        if verbose not in [0, 1, 2]:
            raise ValueError("Invalid verbosity level. Use 0 for no log, 1 for info and 2 for info and debug.")
        self.verbose = verbose
        logging.basicConfig(filename=log_dir + logfile, encoding='utf-8', level=logging.DEBUG, filemode='w') if self.verbose > 0 else None

        self.instance = instance
        self.parameters = parameters if parameters is not None else Parameters()
        self.dispatcher = CallbackDispatcher(self.instance, self.parameters, verbose)
        self.model = None
        self.x, self.y = {}, {}
        self.status = None
        self.runtime = None
        self.callback_error = None
        self.placement = None
        self.service_availabilities = None
        self.n_violations = None
        self.max_violation = None

    def get_var(self, key):
        """
        returns the gurobi variable of key ("x", k, i, v) or ("y", v, f).
        """
        if key[0] == "x":
            return self.x[key[1:]]
        return self.y[key[1:]]

    def build_model(self):
        """
        Declares the variables and constraints of the base model.
        """
        instance, parameters = self.instance, self.parameters
        self.model = gp.Model(self.instance.network.description or "placement", env=env)
        vtype = GRB.CONTINUOUS if parameters.linear_relaxation else GRB.BINARY

        # Placement variables carry the objective.
        for v in range(instance.nb_nodes):
            for f in range(instance.nb_vnfs):
                self.y[v, f] = self.model.addVar(lb = 0, ub = 1, vtype = vtype, obj = instance.get_placement_cost(v, f), name = "y({},{})".format(v, f))
        for k in range(instance.nb_demands):
            for i in range(instance.nb_sections(k)):
                for v in range(instance.nb_nodes):
                    self.x[k, i, v] = self.model.addVar(lb = 0, ub = 1, vtype = vtype, name = "x({},{},{})".format(k, i, v))
        self.model.ModelSense = GRB.MINIMIZE
        self.model.update()

        # Each section is assigned to at least as many nodes as the best nodes need to reach the requirement.
        for k, service in enumerate(instance.services):
            rhs = min_nb_nodes_ranked(service.availability, instance.ranked_availabilities)
            if rhs is None:
                raise ValueError("Availability of service {} cannot be reached with the nodes of the network.".format(service.description))
            for i in range(instance.nb_sections(k)):
                self.model.addConstr(gp.quicksum(self.x[k, i, v] for v in range(instance.nb_nodes)) >= rhs, name = "VNF_Assignment({},{})".format(k, i))

        sections = [(k, i) for k in range(instance.nb_demands) for i in range(instance.nb_sections(k))]
        for v, node in enumerate(instance.nodes):
            self.model.addConstr(gp.quicksum(instance.get_required_capacity(k, i) * self.x[k, i, v] for k, i in sections) <= node.capacity,
                                 name = "Node_Capacity({})".format(v))

        if parameters.disaggregated_placement:
            for k, i in sections:
                f = instance.get_section_vnf(k, i)
                for v in range(instance.nb_nodes):
                    self.model.addConstr(self.x[k, i, v] <= self.y[v, f], name = "VNF_Placement({},{},{})".format(k, i, v))
        else:
            big_m = len(sections)
            for f in range(instance.nb_vnfs):
                for v in range(instance.nb_nodes):
                    used = [self.x[k, i, v] for k, i in sections if instance.get_section_vnf(k, i) == f]
                    self.model.addConstr(gp.quicksum(used) <= big_m * self.y[v, f], name = "Original_VNF_Placement({},{})".format(f, v))

        if parameters.approximation != "none":
            self.add_availability_approximation()

        if parameters.strong_capacity:
            for v, node in enumerate(instance.nodes):
                for f in range(instance.nb_vnfs):
                    used = [(k, i) for k, i in sections if instance.get_section_vnf(k, i) == f]
                    self.model.addConstr(gp.quicksum(instance.get_required_capacity(k, i) * self.x[k, i, v] for k, i in used) <= node.capacity * self.y[v, f],
                                         name = "Strong_Node_Capacity({},{})".format(v, f))

        self.model.setParam("TimeLimit", parameters.time_limit)
        self.model.setParam("Threads", parameters.threads)
        self.model.setParam("Seed", parameters.seed)
        self.model.setParam("PreCrush", 1)
        if parameters.lazy:
            self.model.setParam("LazyConstraints", 1)
        self.model.update()
        logging.info(" Base model built with {} variables and {} constraints.".format(self.model.NumVars, self.model.NumConstrs)) if self.verbose > 0 else None
        if self.verbose == 2:
            self.model.write("{}.lp".format(self.model.getAttr("ModelName")))

    def add_availability_approximation(self):
        """
        Adds the piecewise linear availability formulation. The log of each section availability and unavailability is
        bounded by the minimum of lines lying above log ("relaxation") or below log ("restriction"), so the feasible set
        contains or is contained in the one of the exact availability requirements.
        """
        instance, parameters = self.instance, self.parameters
        max_availability = parallel_availability(instance.ranked_availabilities)
        for k, service in enumerate(instance.services):
            avail_lines = availability_lines(parameters.approximation, service.availability, parameters.nb_breakpoints)
            unavail_lines = unavailability_lines(parameters.approximation, service.availability, max_availability, parameters.nb_breakpoints)
            log_avail = []
            for i in range(instance.nb_sections(k)):
                avail = self.model.addVar(lb = service.availability, ub = max_availability, name = "secAvail({},{})".format(k, i))
                unavail = self.model.addVar(lb = 1 - max_availability, ub = 1 - service.availability, name = "secUnavail({},{})".format(k, i))
                log_avail.append(self.model.addVar(lb = -GRB.INFINITY, ub = 0, name = "logAvail({},{})".format(k, i)))
                log_unavail = self.model.addVar(lb = -GRB.INFINITY, ub = 0, name = "logUnavail({},{})".format(k, i))
                self.model.addConstr(avail + unavail == 1, name = "Avail_Link({},{})".format(k, i))
                for j, (slope, intercept) in enumerate(avail_lines):
                    self.model.addConstr(log_avail[i] <= slope * avail + intercept, name = "Log_Avail({},{},{})".format(k, i, j))
                for j, (slope, intercept) in enumerate(unavail_lines):
                    self.model.addConstr(log_unavail <= slope * unavail + intercept, name = "Log_Unavail({},{},{})".format(k, i, j))
                # The unavailability of a section is at least the product of the unavailabilities of its nodes.
                self.model.addConstr(log_unavail >= gp.quicksum(log(1 - node.availability) * self.x[k, i, v] for v, node in enumerate(instance.nodes)),
                                     name = "Section_Avail({},{})".format(k, i))
            self.model.addConstr(gp.quicksum(log_avail) >= log(service.availability), name = "Req_Avail({})".format(k))
        logging.info(" Availability {} added with {} breakpoints.".format(parameters.approximation, parameters.nb_breakpoints)) if self.verbose > 0 else None

    def callback(self, model, where):
        """
        Forwards the gurobi callback to the dispatcher. A CallbackError stops the search.
        """
        if self.callback_error is not None:
            return
        if where == GRB.Callback.MIPNODE:
            if model.cbGet(GRB.Callback.MIPNODE_STATUS) != GRB.OPTIMAL:
                return
        elif where != GRB.Callback.MIPSOL or not self.parameters.lazy:
            return
        try:
            self.dispatcher.invoke(GurobiContext(self, model, where))
        except CallbackError as e:
            logging.error(" Callback failed: {}".format(e)) if self.verbose > 0 else None
            self.callback_error = e
            model.terminate()

    def optimise(self):
        """
        Finds the cheapest VNF placement.
        """
        if self.model is None:
            self.build_model()
        start = time()
        logging.info(" Solving with parameters:\n{}".format(self.parameters)) if self.verbose > 0 else None
        self.model.optimize(self.callback)
        self.runtime = time() - start
        self.status = self.model.status
        logging.info( " Finished in time {}.".format(self.runtime)) if self.verbose > 0 else None
        if self.callback_error is not None:
            raise self.callback_error

        if self.model.SolCount > 0:
            logging.info( " Optimisation terminated with status {}.".format(self.status)) if self.verbose > 0 else None
            logging.info(' Objective: {}'.format(self.model.objVal)) if self.verbose > 0 else None
        else:
            logging.error(" Optimisation Failed - consult .ilp file") if self.verbose > 0 else None
            if self.status == GRB.INFEASIBLE:
                self.model.computeIIS()
                if self.verbose == 2:
                    self.model.write("{}.ilp".format(self.model.getAttr("ModelName")))
            raise ValueError("Optimisation failed")

    def parse_solution(self):
        """
        Reads the placement of the best solution and computes the availability reached by each service.
        """
        instance = self.instance
        self.placement = {}
        for (v, f), var in self.y.items():
            if var.x > 1 - EPS:
                self.placement.setdefault(instance.nodes[v].description, []).append(instance.vnfs[f].description)

        self.service_availabilities = []
        for k in range(instance.nb_demands):
            sections = []
            for i in range(instance.nb_sections(k)):
                used = [node.availability for v, node in enumerate(instance.nodes) if self.x[k, i, v].x > 1 - EPS]
                sections.append(parallel_availability(used))
            self.service_availabilities.append(chain_availability(sections))

        self.n_violations, self.max_violation = 0, 0.0
        for service, availability in zip(instance.services, self.service_availabilities):
            if not meets_requirement(availability, service.availability):
                self.n_violations += 1
                self.max_violation = max(self.max_violation, service.availability - availability)
        logging.info(" {} availability violations, max violation {}.".format(self.n_violations, self.max_violation)) if self.verbose > 0 else None

    def to_json(self) -> dict:
        """
        Returns a json dictionary describing the result.
        """
        to_return = {}
        to_return["status"] = self.status
        to_return["objective"] = self.model.objVal
        to_return["lower bound"] = self.model.ObjBound if not self.parameters.linear_relaxation else self.model.objVal
        to_return["gap"] = self.model.MIPGap if not self.parameters.linear_relaxation else 0.0
        to_return["runtime"] = self.runtime
        to_return["number of nodes explored"] = self.model.NodeCount if not self.parameters.linear_relaxation else 0
        to_return["number of availability violations"] = self.n_violations
        to_return["max availability violation"] = self.max_violation
        to_return["service availabilities"] = {s.description: a for s, a in zip(self.instance.services, self.service_availabilities)}
        to_return["placement"] = self.placement
        to_return["callback"] = self.dispatcher.statistics.to_json()
        to_return["parameters"] = self.parameters.to_json()
        return to_return

    def save_as_json(self, filename = None):
        """
        saves the result as a JSON to filename.json
        """
        to_dump = self.to_json()
        if filename is not None:
            if filename[-5:] != ".json":
                filename = filename + ".json"
        else:
            filename = self.model.getAttr("ModelName") + ".json"

        with open(filename, 'w') as fp:
            json.dump(to_dump, fp, indent=4, separators=(", ", ": "))
